"""Tests for environment-driven configuration."""
import pytest

from weather_intel.config import AppConfig, DEFAULT_SERVICE_CONFIG, ProviderConfig, ServiceConfig
from weather_intel.data.weather.aggregator import WeatherService

_VARS = (
    "BOM_BASE_URL", "OPEN_METEO_BASE_URL", "WEATHER_TIMEZONE",
    "WEATHER_REQUEST_TIMEOUT_SECONDS", "WEATHER_USER_AGENT",
    "FORECAST_CACHE_TTL_SECONDS", "OBSERVATION_CACHE_TTL_SECONDS",
    "GEOKEY_PRECISION", "PRIMARY_MAX_DAYS", "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in _VARS:
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    cfg = AppConfig.load()

    assert cfg.providers.bom_base_url == "https://api.weather.bom.gov.au/v1"
    assert cfg.providers.timezone == "Australia/Perth"
    assert cfg.providers.request_timeout_seconds == 15.0
    assert cfg.service == DEFAULT_SERVICE_CONFIG
    assert cfg.log_level == "INFO"


def test_overrides(monkeypatch):
    monkeypatch.setenv("FORECAST_CACHE_TTL_SECONDS", "600")
    monkeypatch.setenv("GEOKEY_PRECISION", "6")
    monkeypatch.setenv("WEATHER_TIMEZONE", "Australia/Brisbane")

    assert ServiceConfig.from_env().forecast_cache_ttl_seconds == 600.0
    assert ServiceConfig.from_env().geokey_precision == 6
    assert ProviderConfig.from_env().timezone == "Australia/Brisbane"


@pytest.mark.parametrize("var,value", [
    ("WEATHER_REQUEST_TIMEOUT_SECONDS", "soon"),
    ("GEOKEY_PRECISION", "7.5"),
])
def test_malformed_values_raise(monkeypatch, var, value):
    monkeypatch.setenv(var, value)
    with pytest.raises(EnvironmentError, match=var):
        AppConfig.load()


def test_service_built_from_config(monkeypatch):
    monkeypatch.setenv("OBSERVATION_CACHE_TTL_SECONDS", "60")

    service = WeatherService.from_config(AppConfig.load())

    assert service._observations.ttl_seconds == 60.0
    assert service._forecasts.ttl_seconds == 10800.0
