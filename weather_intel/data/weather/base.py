"""
data.weather.base – shared types and base class for forecast provider clients.

Every provider client returns its data wrapped in a ProviderResult so the
WeatherService can fall back from one provider to the other without
exception unwinding.  Raw upstream payloads carry nullable numeric fields;
they are defaulted to 0 exactly once, by the client, while the
WeatherForecast is built (see `as_float`).  Nothing downstream of this
module sees a None in a numeric series.
"""

from __future__ import annotations

import logging
from abc import ABC
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

import requests

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors that mean "this provider could not give us usable data"
PROVIDER_ERRORS = (requests.RequestException, ValueError, KeyError, TypeError, IndexError)


def as_float(value: Any, default: float = 0.0) -> float:
    """Coerce a nullable upstream number to float, defaulting missing values."""
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def to_jsonable(value: Any) -> Any:
    """Recursively convert dataclass output (dates, enums) to JSON-safe values."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, float) and value == float("inf"):
        return None
    return value


@dataclass(frozen=True)
class GeoCoordinate:
    latitude: float
    longitude: float


@dataclass
class DailyPoint:
    """One calendar day of forecast.  All numeric fields are already defaulted."""
    date: date
    temp_max: float = 0.0
    temp_min: float = 0.0
    precipitation_sum: float = 0.0
    rain_sum: float = 0.0
    wind_speed_max: float = 0.0            # km/h
    wind_direction_dominant: float = 0.0   # degrees


@dataclass
class HourlyPoint:
    timestamp: datetime
    temp: float = 0.0
    precipitation: float = 0.0
    rain: float = 0.0
    wind_speed: float = 0.0                # km/h
    wind_direction: float = 0.0            # degrees


@dataclass
class WeatherForecast:
    """
    A (possibly fused) forecast for one location.

    daily   : chronological, one entry per calendar day, no gaps
    hourly  : chronological; may be empty when only the secondary provider
              answered without hourly data
    source  : "bom", "open-meteo" or "hybrid"
    soil_moisture : depth → series, passed through from the secondary
                    provider for downstream consumers
    """
    coordinate: GeoCoordinate
    timezone: str
    daily: List[DailyPoint] = field(default_factory=list)
    hourly: List[HourlyPoint] = field(default_factory=list)
    source: str = "unknown"
    soil_moisture: Dict[str, List[float]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return to_jsonable(asdict(self))

    def __str__(self) -> str:
        return (
            f"WeatherForecast(source={self.source}, "
            f"days={len(self.daily)}, hours={len(self.hourly)}, "
            f"at=({self.coordinate.latitude:.3f}, {self.coordinate.longitude:.3f}))"
        )


@dataclass
class ObservationSnapshot:
    temp: float
    feels_like: float
    humidity: float
    wind_speed_kmh: float
    wind_direction: str
    gust_speed_kmh: float
    rain_since_9am: float
    station_name: str
    observed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return to_jsonable(asdict(self))


@dataclass
class LocationMatch:
    geokey: str
    name: str
    region: str


@dataclass
class ProviderResult(Generic[T]):
    """Outcome of a single provider call: either a value or an error message."""
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not None

    @classmethod
    def unavailable(cls, reason: str) -> "ProviderResult[T]":
        return cls(value=None, error=reason)


class BaseWeatherClient(ABC):
    """Abstract base for provider HTTP clients."""

    PROVIDER_NAME: str = "UNKNOWN"

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 15.0,
        user_agent: str = "weather-intel/0.1",
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "User-Agent": user_agent,
        })

    # ── Coverage ──────────────────────────────────────────────────────────────

    def covers(self, latitude: float, longitude: float) -> bool:
        """Whether this provider serves the coordinate.  Global by default."""
        return True

    # ── HTTP ──────────────────────────────────────────────────────────────────

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = self._base_url + path if path else self._base_url
        resp = self._session.get(url, params=params, timeout=self._timeout)
        resp.raise_for_status()
        return resp.json()

    def _call(self, label: str, fn: Callable[..., T], *args: Any) -> ProviderResult[T]:
        """Run `fn` and capture any provider failure into a ProviderResult."""
        try:
            value = fn(*args)
        except PROVIDER_ERRORS as exc:
            logger.warning("%s %s failed: %s", self.PROVIDER_NAME, label, exc)
            return ProviderResult.unavailable(f"{self.PROVIDER_NAME} {label}: {exc}")
        if value is None:
            return ProviderResult.unavailable(f"{self.PROVIDER_NAME} {label}: empty response")
        return ProviderResult(value=value)
