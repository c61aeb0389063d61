"""
data.weather.bom – Australian Bureau of Meteorology forecast client (primary).

Uses the public BOM location API (no key required):
    GET /locations/{geohash}/forecasts/daily
    GET /locations/{geohash}/forecasts/hourly
    GET /locations/{geohash}/observations
    GET /locations?search={text}

Strengths: regional models, highest near-term accuracy for Australia.
Weakness: 7-day daily horizon, Australian coverage only.

The API addresses locations by 6-character geohash, so the 7-character
geokey used for caching is truncated before each request.

Timestamps are UTC; a daily record's `date` is the site's local midnight,
which fixes its calendar date on its own.  Hourly points are converted to
the site's timezone, read once per geohash from the location metadata and
cached on the client.  When that lookup fails the configured timezone is
used and the lookup is retried on the next request.

Daily records carry no wind fields; daily wind max and dominant direction
are derived from the hourly run for the same local calendar day.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from .base import (
    BaseWeatherClient,
    DailyPoint,
    GeoCoordinate,
    HourlyPoint,
    LocationMatch,
    ObservationSnapshot,
    PROVIDER_ERRORS,
    ProviderResult,
    WeatherForecast,
    as_float,
)

logger = logging.getLogger(__name__)

# Australian bounding box (mainland + Tasmania)
_COVERAGE = {"lat_min": -44.0, "lat_max": -10.0, "lon_min": 112.0, "lon_max": 154.0}

_API_GEOHASH_LENGTH = 6
_HALF_DAY = timedelta(hours=12)

_COMPASS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]
_COMPASS_DEGREES = {name: idx * 22.5 for idx, name in enumerate(_COMPASS)}


def compass_to_degrees(direction: Optional[str]) -> float:
    """'NW' → 315.0.  Unknown or calm directions map to 0."""
    if not direction:
        return 0.0
    return _COMPASS_DEGREES.get(direction.strip().upper(), 0.0)


def _parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _local_day(midnight_utc: datetime) -> date:
    """
    Calendar date of a daily record.  The record is stamped with the site's
    local midnight in UTC; every Australian zone is UTC+8 to UTC+11, so the
    instant plus 12 h always lands inside the local day.
    """
    return (midnight_utc + _HALF_DAY).date()


def _rain_amount(record: Dict[str, Any]) -> float:
    """Midpoint of the forecast rain range; one-sided ranges use the known bound."""
    amount = (record.get("rain") or {}).get("amount") or {}
    lo, hi = amount.get("min"), amount.get("max")
    if lo is not None and hi is not None:
        return (as_float(lo) + as_float(hi)) / 2
    if hi is not None:
        return as_float(hi)
    return as_float(lo)


class BOMClient(BaseWeatherClient):
    PROVIDER_NAME = "BOM"

    def __init__(
        self,
        base_url: str = "https://api.weather.bom.gov.au/v1",
        timeout_seconds: float = 15.0,
        user_agent: str = "weather-intel/0.1",
        tz_name: str = "Australia/Perth",
        session=None,
    ) -> None:
        super().__init__(base_url, timeout_seconds, user_agent, session)
        self._tz = ZoneInfo(tz_name)
        # 6-char geohash → site timezone
        self._zones: Dict[str, ZoneInfo] = {}
        self._zones_lock = threading.Lock()

    def covers(self, latitude: float, longitude: float) -> bool:
        return (
            _COVERAGE["lat_min"] <= latitude <= _COVERAGE["lat_max"]
            and _COVERAGE["lon_min"] <= longitude <= _COVERAGE["lon_max"]
        )

    # ── Public interface ──────────────────────────────────────────────────────

    def fetch_daily(self, geokey: str) -> ProviderResult[List[DailyPoint]]:
        return self._call("daily forecast", self._fetch_daily, geokey)

    def fetch_hourly(self, geokey: str) -> ProviderResult[List[HourlyPoint]]:
        return self._call("hourly forecast", self._fetch_hourly, geokey)

    def fetch_observations(self, geokey: str) -> ProviderResult[ObservationSnapshot]:
        return self._call("observations", self._fetch_observations, geokey)

    def search(self, query: str) -> ProviderResult[List[LocationMatch]]:
        return self._call("location search", self._search, query)

    def site_timezone(self, geokey: str) -> ZoneInfo:
        """Timezone of the BOM location for `geokey`, falling back to the configured zone."""
        api_key = geokey[:_API_GEOHASH_LENGTH]
        with self._zones_lock:
            zone = self._zones.get(api_key)
            if zone is not None:
                return zone
            try:
                data = self._get(f"/locations/{api_key}")
                zone = ZoneInfo(data["data"]["timezone"])
            except PROVIDER_ERRORS as exc:
                logger.warning("BOM location metadata for %s failed, using %s: %s",
                               api_key, self._tz.key, exc)
                return self._tz
            self._zones[api_key] = zone
            return zone

    def build_forecast(
        self,
        coordinate: GeoCoordinate,
        daily: List[DailyPoint],
        hourly: List[HourlyPoint],
        geokey: Optional[str] = None,
    ) -> WeatherForecast:
        """
        Combine the daily and hourly runs, filling daily wind from hourly.

        Hourly points are expected in the site timezone (as fetch_hourly
        returns them), so their calendar date is the site's local day.
        """
        with self._zones_lock:
            zone = self._zones.get(geokey[:_API_GEOHASH_LENGTH]) if geokey else None
        by_day: Dict[date, List[HourlyPoint]] = {}
        for point in hourly:
            by_day.setdefault(point.timestamp.date(), []).append(point)

        for day in daily:
            hours = by_day.get(day.date)
            if not hours:
                continue
            day.wind_speed_max = max(h.wind_speed for h in hours)
            directions = Counter(h.wind_direction for h in hours)
            day.wind_direction_dominant = directions.most_common(1)[0][0]

        return WeatherForecast(
            coordinate=coordinate,
            timezone=(zone or self._tz).key,
            daily=daily,
            hourly=hourly,
            source="bom",
        )

    # ── Requests + parsing ────────────────────────────────────────────────────

    def _path(self, geokey: str, suffix: str) -> str:
        return f"/locations/{geokey[:_API_GEOHASH_LENGTH]}{suffix}"

    def _fetch_daily(self, geokey: str) -> List[DailyPoint]:
        data = self._get(self._path(geokey, "/forecasts/daily"))
        return self._parse_daily(data)

    def _fetch_hourly(self, geokey: str) -> List[HourlyPoint]:
        zone = self.site_timezone(geokey)
        data = self._get(self._path(geokey, "/forecasts/hourly"))
        return self._parse_hourly(data, zone)

    def _fetch_observations(self, geokey: str) -> Optional[ObservationSnapshot]:
        data = self._get(self._path(geokey, "/observations"))
        return self._parse_observations(data)

    def _search(self, query: str) -> List[LocationMatch]:
        data = self._get("/locations", params={"search": query})
        return [
            LocationMatch(
                geokey=item["geohash"],
                name=item.get("name") or "",
                region=item.get("state") or "",
            )
            for item in data.get("data") or []
            if item.get("geohash")
        ]

    def _parse_daily(self, data: dict) -> List[DailyPoint]:
        records = data["data"]
        points: List[DailyPoint] = []
        for record in records:
            day = _local_day(_parse_time(record["date"]))
            rain = _rain_amount(record)
            points.append(DailyPoint(
                date=day,
                temp_max=as_float(record.get("temp_max")),
                temp_min=as_float(record.get("temp_min")),
                precipitation_sum=rain,
                rain_sum=rain,
            ))
        if not points:
            raise ValueError("daily forecast contained no records")
        return points

    def _parse_hourly(self, data: dict, zone: Optional[ZoneInfo] = None) -> List[HourlyPoint]:
        zone = zone or self._tz
        points: List[HourlyPoint] = []
        for record in data["data"]:
            wind = record.get("wind") or {}
            rain = _rain_amount(record)
            points.append(HourlyPoint(
                timestamp=_parse_time(record["time"]).astimezone(zone),
                temp=as_float(record.get("temp")),
                precipitation=rain,
                rain=rain,
                wind_speed=as_float(wind.get("speed_kilometre")),
                wind_direction=compass_to_degrees(wind.get("direction")),
            ))
        return points

    def _parse_observations(self, data: dict) -> Optional[ObservationSnapshot]:
        obs = data.get("data")
        if not obs:
            return None
        wind = obs.get("wind") or {}
        gust = obs.get("gust") or {}
        station = obs.get("station") or {}
        observed_raw = (data.get("metadata") or {}).get("observation_time")
        return ObservationSnapshot(
            temp=as_float(obs.get("temp")),
            feels_like=as_float(obs.get("temp_feels_like")),
            humidity=as_float(obs.get("humidity")),
            wind_speed_kmh=as_float(wind.get("speed_kilometre")),
            wind_direction=wind.get("direction") or "",
            gust_speed_kmh=as_float(gust.get("speed_kilometre")),
            rain_since_9am=as_float(obs.get("rain_since_9am")),
            station_name=station.get("name") or "",
            observed_at=_parse_time(observed_raw) if observed_raw else datetime.now(timezone.utc),
        )
