"""
data.weather.aggregator – forecast acquisition and fusion.

Pulls forecasts from the primary (BOM, regional, ≤7 days, high accuracy)
and secondary (Open-Meteo, global, up to 16 days) providers and produces a
single WeatherForecast.

Key design principle: the near term comes from the most accurate source,
the long range from the source that reaches furthest.
  1. Inside BOM coverage, days ≤ 7 → BOM only.
  2. Inside BOM coverage, days > 7  → BOM for the first week, Open-Meteo
     for the remainder ("hybrid").
  3. Outside coverage, or BOM daily failure → Open-Meteo only.
  4. Everything failed → None.  The caller decides what to do.

Callers get their own copy of a forecast or observation; the cached
instance is never handed out, so editing a result cannot leak into later
cache hits.

All provider requests for one call are issued together on a small thread
pool and joined, so latency is bounded by the slowest single request.
Nothing raises past this module; every failure degrades to the other
provider or to None.
"""

from __future__ import annotations

import copy
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from weather_intel.config import AppConfig, DEFAULT_SERVICE_CONFIG, ServiceConfig

from . import geokey as geokey_codec
from .base import (
    GeoCoordinate,
    LocationMatch,
    ObservationSnapshot,
    ProviderResult,
    WeatherForecast,
)
from .bom import BOMClient
from .cache import TTLCache
from .open_meteo import OpenMeteoClient

logger = logging.getLogger(__name__)

_MAX_WORKERS = 3   # primary daily, primary hourly, secondary


def merge_forecasts(
    primary: WeatherForecast,
    secondary: WeatherForecast,
    primary_days: int = 7,
) -> WeatherForecast:
    """
    Splice a long-range forecast onto a short-range one.

    Daily  : primary's first min(primary_days, len) days, then secondary
             from that index onward.
    Hourly : primary's full hourly run, then secondary from index
             len(primary.hourly) onward.  Splicing is by position, not by
             matching date strings.
    """
    kept_daily = primary.daily[:min(primary_days, len(primary.daily))]
    daily = kept_daily + secondary.daily[len(kept_daily):]
    hourly = primary.hourly + secondary.hourly[len(primary.hourly):]

    return WeatherForecast(
        coordinate=primary.coordinate,
        timezone=primary.timezone,
        daily=daily,
        hourly=hourly,
        source="hybrid",
        soil_moisture=secondary.soil_moisture,
    )


def _truncate(forecast: WeatherForecast, days: int) -> WeatherForecast:
    forecast.daily = forecast.daily[:days]
    return forecast


def _join(future: Optional[Future], label: str) -> ProviderResult:
    """Resolve a provider future without letting anything escape."""
    if future is None:
        return ProviderResult.unavailable(f"{label}: not requested")
    try:
        return future.result()
    except Exception as exc:
        logger.warning("%s failed unexpectedly: %s", label, exc)
        return ProviderResult.unavailable(f"{label}: {exc}")


class WeatherService:
    """
    Usage
    -----
    service = WeatherService()
    forecast = service.get_forecast(-31.95, 115.86, days=14)
    if forecast is None:
        ...  # forecast unavailable this cycle
    """

    def __init__(
        self,
        primary: Optional[BOMClient] = None,
        secondary: Optional[OpenMeteoClient] = None,
        forecast_cache: Optional[TTLCache[WeatherForecast]] = None,
        observation_cache: Optional[TTLCache[ObservationSnapshot]] = None,
        config: Optional[ServiceConfig] = None,
    ) -> None:
        self._config = config or DEFAULT_SERVICE_CONFIG
        self._primary = primary or BOMClient()
        self._secondary = secondary or OpenMeteoClient()
        self._forecasts: TTLCache[WeatherForecast] = (
            forecast_cache or TTLCache(self._config.forecast_cache_ttl_seconds)
        )
        self._observations: TTLCache[ObservationSnapshot] = (
            observation_cache or TTLCache(self._config.observation_cache_ttl_seconds)
        )

    @classmethod
    def from_config(cls, cfg: AppConfig) -> "WeatherService":
        p = cfg.providers
        return cls(
            primary=BOMClient(
                base_url=p.bom_base_url,
                timeout_seconds=p.request_timeout_seconds,
                user_agent=p.user_agent,
                tz_name=p.timezone,
            ),
            secondary=OpenMeteoClient(
                base_url=p.open_meteo_base_url,
                timeout_seconds=p.request_timeout_seconds,
                user_agent=p.user_agent,
                tz_name=p.timezone,
            ),
            config=cfg.service,
        )

    # ── Public API ────────────────────────────────────────────────────────────

    def get_forecast(
        self,
        latitude: float,
        longitude: float,
        days: int = 7,
    ) -> Optional[WeatherForecast]:
        key = geokey_codec.encode(latitude, longitude, self._config.geokey_precision)
        cache_key = f"{key}:{days}"

        cached = self._forecasts.get(cache_key)
        if cached is not None:
            logger.debug("Forecast cache hit for %s", cache_key)
            return copy.deepcopy(cached)

        forecast = self._acquire(key, GeoCoordinate(latitude, longitude), days)
        if forecast is None:
            logger.warning(
                "No forecast available for (%.4f, %.4f) – all providers failed",
                latitude, longitude,
            )
            return None

        self._forecasts.put(cache_key, copy.deepcopy(forecast))
        logger.info("Cached %s under %s", forecast, cache_key)
        return forecast

    def get_observations(
        self,
        latitude: float,
        longitude: float,
    ) -> Optional[ObservationSnapshot]:
        if not self._primary.covers(latitude, longitude):
            logger.debug("(%.4f, %.4f) outside %s coverage – no observations",
                         latitude, longitude, self._primary.PROVIDER_NAME)
            return None

        key = geokey_codec.encode(latitude, longitude, self._config.geokey_precision)
        cached = self._observations.get(key)
        if cached is not None:
            return copy.deepcopy(cached)

        result = self._primary.fetch_observations(key)
        if not result.ok:
            return None
        self._observations.put(key, copy.deepcopy(result.value))
        return result.value

    def search_location(self, query: str) -> Optional[LocationMatch]:
        if not query or not query.strip():
            return None
        result = self._primary.search(query.strip())
        if not result.ok or not result.value:
            logger.info("Location search for %r found nothing", query)
            return None
        return result.value[0]

    def cache_stats(self) -> dict:
        return {
            "forecasts": self._forecasts.stats(),
            "observations": self._observations.stats(),
        }

    def clear_cache(self) -> None:
        self._forecasts.clear()
        self._observations.clear()

    # ── Acquisition ───────────────────────────────────────────────────────────

    def _acquire(
        self,
        key: str,
        coordinate: GeoCoordinate,
        days: int,
    ) -> Optional[WeatherForecast]:
        lat, lon = coordinate.latitude, coordinate.longitude
        in_coverage = self._primary.covers(lat, lon)
        primary_days = self._config.primary_max_days
        wants_extended = days > primary_days

        with ThreadPoolExecutor(max_workers=_MAX_WORKERS) as pool:
            daily_f = hourly_f = secondary_f = None
            if in_coverage:
                daily_f = pool.submit(self._primary.fetch_daily, key)
                hourly_f = pool.submit(self._primary.fetch_hourly, key)
            else:
                logger.debug("(%.4f, %.4f) outside %s coverage",
                             lat, lon, self._primary.PROVIDER_NAME)
            if wants_extended or not in_coverage:
                secondary_f = pool.submit(self._secondary.fetch_forecast, lat, lon, days)

            daily = _join(daily_f, "primary daily")
            if daily.ok:
                hourly = _join(hourly_f, "primary hourly")
                if not hourly.ok:
                    logger.info("Primary hourly unavailable – continuing with daily only")
                primary = self._primary.build_forecast(
                    coordinate, daily.value, hourly.value if hourly.ok else [], key
                )

                if not wants_extended:
                    return _truncate(primary, days)

                secondary = _join(secondary_f, "secondary forecast")
                if not secondary.ok:
                    logger.info("Secondary unavailable – returning primary-only forecast")
                    return _truncate(primary, days)
                return merge_forecasts(primary, secondary.value, primary_days)

            # Fallback: secondary alone
            if secondary_f is None:
                secondary_f = pool.submit(self._secondary.fetch_forecast, lat, lon, days)
            secondary = _join(secondary_f, "secondary forecast")
            return secondary.value if secondary.ok else None
