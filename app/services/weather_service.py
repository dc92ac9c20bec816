import asyncio
import logging
from typing import List, Optional

import httpx

from app.core.config import settings
from app.models.weather import (
    AlertSeverity,
    CurrentConditions,
    CurrentWeatherResponse,
    ForecastEntry,
    ForecastResponse,
    TemperatureRange,
    WeatherAlert,
    WeatherSnapshot,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://api.openweathermap.org/data/2.5"
FORECAST_SLOTS = 5


def _params(lat: float, lon: float) -> dict:
    return {
        "lat": lat,
        "lon": lon,
        "appid": settings.OPENWEATHERMAP_API_KEY,
        "units": "metric",
        "lang": "vi",
    }


async def get_current_weather(
    lat: float, lon: float
) -> Optional[CurrentWeatherResponse]:
    """
    Fetches the current weather for a given latitude and longitude.

    Returns:
        A CurrentWeatherResponse object or None if the provider refuses the request.
    """
    async with httpx.AsyncClient(timeout=settings.WEATHER_TIMEOUT_SECONDS) as client:
        response = await client.get(f"{BASE_URL}/weather", params=_params(lat, lon))
        if response.status_code == 200:
            return CurrentWeatherResponse(**response.json())
        logger.warning(
            "Current weather request for (%s, %s) returned %s",
            lat,
            lon,
            response.status_code,
        )
    return None


async def get_5_day_3_hour_forecast(
    lat: float, lon: float
) -> Optional[ForecastResponse]:
    """
    Fetches the 5-day forecast (with 3-hour intervals) for a given location.

    Returns:
        A ForecastResponse object or None if the provider refuses the request.
    """
    async with httpx.AsyncClient(timeout=settings.WEATHER_TIMEOUT_SECONDS) as client:
        response = await client.get(f"{BASE_URL}/forecast", params=_params(lat, lon))
        if response.status_code == 200:
            return ForecastResponse(**response.json())
        logger.warning(
            "Forecast request for (%s, %s) returned %s",
            lat,
            lon,
            response.status_code,
        )
    return None


def build_weather_snapshot(
    current: CurrentWeatherResponse, forecast: Optional[ForecastResponse]
) -> WeatherSnapshot:
    condition = current.weather[0] if current.weather else None
    entries: List[ForecastEntry] = []
    for item in (forecast.list if forecast else [])[:FORECAST_SLOTS]:
        item_condition = item.weather[0] if item.weather else None
        entries.append(
            ForecastEntry(
                date=item.dt,
                temperature=TemperatureRange(
                    min=round(item.main.temp_min), max=round(item.main.temp_max)
                ),
                humidity=item.main.humidity,
                description=item_condition.description if item_condition else "",
                icon=item_condition.icon if item_condition else None,
                rain=(item.rain.three_hours or 0.0) if item.rain else 0.0,
            )
        )

    return WeatherSnapshot(
        location_name=current.name or None,
        current=CurrentConditions(
            temperature=round(current.main.temp),
            humidity=current.main.humidity,
            pressure=current.main.pressure,
            description=condition.description if condition else "",
            icon=condition.icon if condition else None,
            wind_speed=current.wind.speed,
            wind_direction=current.wind.deg,
        ),
        forecast=entries,
    )


async def get_weather_snapshot(lat: float, lon: float) -> Optional[WeatherSnapshot]:
    """Current conditions and the next forecast slots, or None without current data."""
    current, forecast = await asyncio.gather(
        get_current_weather(lat, lon), get_5_day_3_hour_forecast(lat, lon)
    )
    if current is None:
        return None
    return build_weather_snapshot(current, forecast)


def derive_weather_alerts(snapshot: WeatherSnapshot) -> List[WeatherAlert]:
    """Agricultural hazard alerts derived from a weather snapshot."""
    alerts: List[WeatherAlert] = []
    current = snapshot.current
    upcoming = snapshot.forecast[0] if snapshot.forecast else None

    if upcoming is not None and upcoming.temperature.min < 5:
        alerts.append(
            WeatherAlert(
                type="frost_warning",
                severity=AlertSeverity.HIGH,
                message="Cảnh báo sương giá: Nhiệt độ có thể xuống dưới 5°C",
                recommendation="Che phủ cây trồng hoặc di chuyển vào nhà",
            )
        )

    if upcoming is not None and upcoming.rain > 20:
        alerts.append(
            WeatherAlert(
                type="heavy_rain",
                severity=AlertSeverity.MEDIUM,
                message=f"Cảnh báo mưa lớn: Dự báo {upcoming.rain:g}mm",
                recommendation="Kiểm tra hệ thống thoát nước, tránh úng nước",
            )
        )

    if current.humidity < 30:
        alerts.append(
            WeatherAlert(
                type="drought_warning",
                severity=AlertSeverity.MEDIUM,
                message="Cảnh báo hạn hán: Độ ẩm rất thấp",
                recommendation="Tăng cường tưới nước và che phủ đất",
            )
        )

    if current.wind_speed > 15:
        alerts.append(
            WeatherAlert(
                type="strong_wind",
                severity=AlertSeverity.LOW,
                message=f"Cảnh báo gió mạnh: Tốc độ gió {current.wind_speed:g} m/s",
                recommendation="Cố định cây trồng, tránh gãy đổ",
            )
        )

    return alerts
