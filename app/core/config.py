import os

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    GEMINI_API_KEY: str = os.environ.get("GEMINI_API_KEY", "")
    OPENWEATHERMAP_API_KEY: str = os.environ.get("OPENWEATHERMAP_API_KEY", "")
    PLANT_ID_API_KEY: str = os.environ.get("PLANT_ID_API_KEY", "")
    JWT_SECRET_KEY: str = os.environ.get("JWT_SECRET_KEY", "")
    MONGO_URI: str = os.environ.get("MONGO_URI", "")
    MONGO_DIRECT_URI: str = os.environ.get("MONGO_DIRECT_URI", "")
    MONGO_DB_NAME: str = "greengrow"

    ADVISORY_MODEL: str = "gemini-2.5-flash"
    ADVISORY_TEMPERATURE: float = 0.2
    ADVISORY_MAX_TOKENS: int = 500
    CHAT_TEMPERATURE: float = 0.7
    CHAT_MAX_TOKENS: int = 1000

    WEATHER_TIMEOUT_SECONDS: float = 10.0
    PLANT_ID_TIMEOUT_SECONDS: float = 30.0
    ARTICLE_FETCH_TIMEOUT_SECONDS: float = 10.0

    # Hà Nội, used when a chat request carries no weather hint
    DEFAULT_WEATHER_LAT: float = 21.0285
    DEFAULT_WEATHER_LON: float = 105.8542

    ARTICLE_REFRESH_ENABLED: bool = True
    ARTICLE_REFRESH_HOUR: int = 2
    ARTICLE_REFRESH_TIMEZONE: str = "Asia/Ho_Chi_Minh"

    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")


settings = Settings()
