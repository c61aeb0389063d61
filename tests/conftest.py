"""Shared forecast builders for the test suite."""

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Sequence

import pytest

from weather_intel.data.weather.base import (
    DailyPoint,
    GeoCoordinate,
    HourlyPoint,
    WeatherForecast,
)

START = date(2026, 1, 5)


def make_daily(
    n: int = 7,
    rain: Optional[Sequence[float]] = None,
    temp_max: Optional[Sequence[float]] = None,
    wind: Optional[Sequence[float]] = None,
    start: date = START,
) -> List[DailyPoint]:
    rain = list(rain) if rain is not None else [0.0] * n
    n = len(rain)
    temp_max = list(temp_max) if temp_max is not None else [30.0] * n
    wind = list(wind) if wind is not None else [10.0] * n
    return [
        DailyPoint(
            date=start + timedelta(days=i),
            temp_max=temp_max[i],
            temp_min=temp_max[i] - 12,
            precipitation_sum=rain[i],
            rain_sum=rain[i],
            wind_speed_max=wind[i],
            wind_direction_dominant=180.0,
        )
        for i in range(n)
    ]


def make_hourly(rain: Sequence[float], start: Optional[datetime] = None) -> List[HourlyPoint]:
    start = start or datetime(START.year, START.month, START.day, tzinfo=timezone.utc)
    return [
        HourlyPoint(timestamp=start + timedelta(hours=i), temp=25.0,
                    precipitation=r, rain=r, wind_speed=12.0)
        for i, r in enumerate(rain)
    ]


def make_forecast(
    rain: Optional[Sequence[float]] = None,
    temp_max: Optional[Sequence[float]] = None,
    wind: Optional[Sequence[float]] = None,
    hourly_rain: Optional[Sequence[float]] = None,
    n: int = 7,
    start: date = START,
    source: str = "test",
    lat: float = -31.95,
    lon: float = 115.86,
) -> WeatherForecast:
    if rain is None and temp_max is not None:
        rain = [0.0] * len(temp_max)
    if rain is None and wind is not None:
        rain = [0.0] * len(wind)
    return WeatherForecast(
        coordinate=GeoCoordinate(lat, lon),
        timezone="Australia/Perth",
        daily=make_daily(n, rain, temp_max, wind, start),
        hourly=make_hourly(hourly_rain) if hourly_rain is not None else [],
        source=source,
    )


@pytest.fixture
def dry_week():
    return make_forecast(rain=[0.0] * 7)
