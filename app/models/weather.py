from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

# --- OpenWeatherMap payloads ---


class WeatherCondition(BaseModel):
    """Describes the weather condition (e.g., 'Clouds', 'Rain')."""

    id: int
    main: str
    description: str
    icon: str


class MainWeatherData(BaseModel):
    """Core weather metrics like temperature and humidity."""

    temp: float
    feels_like: Optional[float] = None
    temp_min: float
    temp_max: float
    pressure: int
    humidity: int


class Wind(BaseModel):
    speed: float
    deg: Optional[int] = None
    gust: Optional[float] = None


class Precipitation(BaseModel):
    """Rain volume over the last one or three hours."""

    one_hour: Optional[float] = Field(None, alias="1h")
    three_hours: Optional[float] = Field(None, alias="3h")


class Coordinates(BaseModel):
    lat: float
    lon: float


class CurrentWeatherResponse(BaseModel):
    """Subset of the Current Weather API response used by the advisory."""

    coord: Optional[Coordinates] = None
    weather: List[WeatherCondition]
    main: MainWeatherData
    wind: Wind
    rain: Optional[Precipitation] = None
    dt: datetime
    name: str = ""


class ForecastListItem(BaseModel):
    """A single 3-hour forecast entry."""

    dt: datetime
    main: MainWeatherData
    weather: List[WeatherCondition]
    wind: Optional[Wind] = None
    pop: float = Field(default=0.0, description="Probability of precipitation")
    rain: Optional[Precipitation] = None
    dt_txt: Optional[str] = None


class ForecastResponse(BaseModel):
    """Model for the 5-day/3-hour Forecast API response."""

    list: List[ForecastListItem]


# --- Advisory-facing snapshot ---


class CurrentConditions(BaseModel):
    temperature: float
    humidity: float
    pressure: Optional[float] = None
    description: str
    icon: Optional[str] = None
    wind_speed: float = Field(
        default=0.0, validation_alias=AliasChoices("wind_speed", "windSpeed")
    )
    wind_direction: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("wind_direction", "windDirection")
    )


class TemperatureRange(BaseModel):
    min: float
    max: float


class ForecastEntry(BaseModel):
    date: datetime
    temperature: TemperatureRange
    humidity: Optional[float] = None
    description: str = ""
    icon: Optional[str] = None
    rain: float = 0.0


class WeatherSnapshot(BaseModel):
    """Current conditions plus the next forecast slots for one location."""

    location_name: Optional[str] = None
    current: CurrentConditions
    forecast: List[ForecastEntry] = Field(default_factory=list)


class AlertSeverity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class WeatherAlert(BaseModel):
    type: str
    severity: AlertSeverity
    message: str
    recommendation: str
