"""
Tests for agricultural hazard alerts derived from a weather snapshot
"""
import pytest

from app.models.weather import AlertSeverity
from app.services.weather_service import derive_weather_alerts
from conftest import make_snapshot


class TestWeatherAlerts:

    def test_calm_weather_has_no_alerts(self):
        assert derive_weather_alerts(make_snapshot()) == []

    @pytest.mark.parametrize("kwargs,alert_type,severity", [
        ({"first_min": 3}, "frost_warning", AlertSeverity.HIGH),
        ({"first_rain": 42.5}, "heavy_rain", AlertSeverity.MEDIUM),
        ({"humidity": 25}, "drought_warning", AlertSeverity.MEDIUM),
        ({"wind_speed": 18}, "strong_wind", AlertSeverity.LOW),
    ])
    def test_single_hazard(self, kwargs, alert_type, severity):
        alerts = derive_weather_alerts(make_snapshot(**kwargs))
        assert len(alerts) == 1
        assert alerts[0].type == alert_type
        assert alerts[0].severity == severity
        assert alerts[0].recommendation

    @pytest.mark.parametrize("kwargs", [
        {"first_min": 5},
        {"first_rain": 20},
        {"humidity": 30},
        {"wind_speed": 15},
    ])
    def test_thresholds_are_exclusive(self, kwargs):
        assert derive_weather_alerts(make_snapshot(**kwargs)) == []

    def test_rain_amount_in_message(self):
        alerts = derive_weather_alerts(make_snapshot(first_rain=42.5))
        assert "42.5mm" in alerts[0].message

    def test_no_forecast_only_checks_current(self):
        snapshot = make_snapshot(humidity=20, first_min=0)
        snapshot.forecast = []
        assert [alert.type for alert in derive_weather_alerts(snapshot)] == ["drought_warning"]
