"""data.weather – forecast provider clients, cache and fusion service."""
from .base import (
    DailyPoint,
    GeoCoordinate,
    HourlyPoint,
    LocationMatch,
    ObservationSnapshot,
    ProviderResult,
    WeatherForecast,
)
from .bom import BOMClient
from .open_meteo import OpenMeteoClient
from .cache import TTLCache
from .aggregator import WeatherService, merge_forecasts

__all__ = ["DailyPoint", "GeoCoordinate", "HourlyPoint", "LocationMatch",
           "ObservationSnapshot", "ProviderResult", "WeatherForecast",
           "BOMClient", "OpenMeteoClient", "TTLCache",
           "WeatherService", "merge_forecasts"]
