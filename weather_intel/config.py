"""
config.py – centralised settings loaded from environment / .env file.
All other modules import from here; nothing reads os.environ directly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the package directory, then the working directory
_ENV_PATH = Path(__file__).parent / ".env"
load_dotenv(_ENV_PATH, override=False)
load_dotenv(override=False)


def _get(key: str, default: str = "") -> str:
    return os.getenv(key, default)


def _get_float(key: str, default: str) -> float:
    raw = _get(key, default)
    try:
        return float(raw)
    except ValueError:
        raise EnvironmentError(
            f"Environment variable '{key}' must be a number, got {raw!r}."
        ) from None


def _get_int(key: str, default: str) -> int:
    raw = _get(key, default)
    try:
        return int(raw)
    except ValueError:
        raise EnvironmentError(
            f"Environment variable '{key}' must be an integer, got {raw!r}."
        ) from None


# ── Providers ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProviderConfig:
    bom_base_url: str
    open_meteo_base_url: str
    timezone: str
    request_timeout_seconds: float   # applied to every upstream request
    user_agent: str

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        return cls(
            bom_base_url=_get("BOM_BASE_URL", "https://api.weather.bom.gov.au/v1"),
            open_meteo_base_url=_get(
                "OPEN_METEO_BASE_URL", "https://api.open-meteo.com/v1/forecast"
            ),
            timezone=_get("WEATHER_TIMEZONE", "Australia/Perth"),
            request_timeout_seconds=_get_float("WEATHER_REQUEST_TIMEOUT_SECONDS", "15"),
            user_agent=_get("WEATHER_USER_AGENT", "weather-intel/0.1"),
        )


# ── Acquisition / caching ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class ServiceConfig:
    forecast_cache_ttl_seconds: float      # 3 h
    observation_cache_ttl_seconds: float   # 15 min
    geokey_precision: int
    primary_max_days: int                  # days taken from the primary provider

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        return cls(
            forecast_cache_ttl_seconds=_get_float("FORECAST_CACHE_TTL_SECONDS", "10800"),
            observation_cache_ttl_seconds=_get_float("OBSERVATION_CACHE_TTL_SECONDS", "900"),
            geokey_precision=_get_int("GEOKEY_PRECISION", "7"),
            primary_max_days=_get_int("PRIMARY_MAX_DAYS", "7"),
        )


DEFAULT_SERVICE_CONFIG = ServiceConfig(
    forecast_cache_ttl_seconds=3 * 3600,
    observation_cache_ttl_seconds=15 * 60,
    geokey_precision=7,
    primary_max_days=7,
)


# ── Aggregate config ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AppConfig:
    providers: ProviderConfig
    service: ServiceConfig
    log_level: str

    @classmethod
    def load(cls) -> "AppConfig":
        return cls(
            providers=ProviderConfig.from_env(),
            service=ServiceConfig.from_env(),
            log_level=_get("LOG_LEVEL", "INFO"),
        )
