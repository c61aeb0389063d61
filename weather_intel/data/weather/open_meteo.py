"""
data.weather.open_meteo – Open-Meteo forecast client (secondary).

Uses Open-Meteo's free forecast endpoint ("best_match" model blend).
No API key required.

Requests use `timezone=auto`, so daily totals are cut at the site's own
midnight and the response names that zone.  The configured timezone is
only a fallback for responses that omit it.

Strengths: global coverage, up to 16 forecast days, daily + hourly series
from a single request, soil moisture by depth.
Weakness: coarser than the regional BOM models for the first week.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List
from zoneinfo import ZoneInfo

from .base import (
    BaseWeatherClient,
    DailyPoint,
    GeoCoordinate,
    HourlyPoint,
    ProviderResult,
    WeatherForecast,
    as_float,
)

MAX_FORECAST_DAYS = 16

_DAILY_FIELDS = (
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "rain_sum",
    "windspeed_10m_max",
    "winddirection_10m_dominant",
)
_HOURLY_FIELDS = (
    "temperature_2m",
    "precipitation",
    "rain",
    "windspeed_10m",
    "winddirection_10m",
)
_SOIL_FIELDS = (
    "soil_moisture_0_to_1cm",
    "soil_moisture_1_to_3cm",
    "soil_moisture_3_to_9cm",
    "soil_moisture_9_to_27cm",
)


class OpenMeteoClient(BaseWeatherClient):
    PROVIDER_NAME = "OpenMeteo"

    def __init__(
        self,
        base_url: str = "https://api.open-meteo.com/v1/forecast",
        timeout_seconds: float = 15.0,
        user_agent: str = "weather-intel/0.1",
        tz_name: str = "Australia/Perth",
        session=None,
    ) -> None:
        super().__init__(base_url, timeout_seconds, user_agent, session)
        self._tz_name = tz_name

    # ── Public interface ──────────────────────────────────────────────────────

    def fetch_forecast(
        self,
        latitude: float,
        longitude: float,
        days: int,
    ) -> ProviderResult[WeatherForecast]:
        return self._call("forecast", self._fetch, latitude, longitude, days)

    # ── Requests + parsing ────────────────────────────────────────────────────

    def _fetch(self, latitude: float, longitude: float, days: int) -> WeatherForecast:
        params: Dict[str, Any] = {
            "latitude": latitude,
            "longitude": longitude,
            "daily": ",".join(_DAILY_FIELDS),
            "hourly": ",".join(_HOURLY_FIELDS + _SOIL_FIELDS),
            "forecast_days": max(1, min(days, MAX_FORECAST_DAYS)),
            "timezone": "auto",
        }
        data = self._get("", params=params)
        return self._parse(data, GeoCoordinate(latitude, longitude))

    def _parse(self, data: dict, coordinate: GeoCoordinate) -> WeatherForecast:
        daily_raw = data["daily"]
        hourly_raw = data.get("hourly") or {}

        def _series(block: dict, key: str, idx: int) -> float:
            vals = block.get(key) or []
            return as_float(vals[idx]) if idx < len(vals) else 0.0

        daily: List[DailyPoint] = []
        for idx, day in enumerate(daily_raw["time"]):
            daily.append(DailyPoint(
                date=date.fromisoformat(day),
                temp_max=_series(daily_raw, "temperature_2m_max", idx),
                temp_min=_series(daily_raw, "temperature_2m_min", idx),
                precipitation_sum=_series(daily_raw, "precipitation_sum", idx),
                rain_sum=_series(daily_raw, "rain_sum", idx),
                wind_speed_max=_series(daily_raw, "windspeed_10m_max", idx),
                wind_direction_dominant=_series(daily_raw, "winddirection_10m_dominant", idx),
            ))
        if not daily:
            raise ValueError("forecast contained no daily records")

        tz = ZoneInfo(data.get("timezone") or self._tz_name)
        hourly: List[HourlyPoint] = []
        for idx, ts in enumerate(hourly_raw.get("time") or []):
            hourly.append(HourlyPoint(
                timestamp=datetime.fromisoformat(ts).replace(tzinfo=tz),
                temp=_series(hourly_raw, "temperature_2m", idx),
                precipitation=_series(hourly_raw, "precipitation", idx),
                rain=_series(hourly_raw, "rain", idx),
                wind_speed=_series(hourly_raw, "windspeed_10m", idx),
                wind_direction=_series(hourly_raw, "winddirection_10m", idx),
            ))

        soil = {
            key: [as_float(v) for v in hourly_raw[key]]
            for key in _SOIL_FIELDS
            if hourly_raw.get(key)
        }

        return WeatherForecast(
            coordinate=coordinate,
            timezone=data.get("timezone") or self._tz_name,
            daily=daily,
            hourly=hourly,
            source="open-meteo",
            soil_moisture=soil,
        )
