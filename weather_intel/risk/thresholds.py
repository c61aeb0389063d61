"""
risk.thresholds – industry-specific weather thresholds.

One table keyed by IndustryType so tuning a value happens in one place.
Heat and cyclone thresholds are shared; storm wind and rain thresholds are
lower for general/urban sites than for remote mining sites.

Heat is 45 °C for both: 38 °C is an ordinary summer day on a mine site,
only truly extreme heat changes equipment behaviour.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union


class IndustryType(str, Enum):
    MINING = "mining"
    GENERAL = "general"


@dataclass(frozen=True)
class IndustryThresholds:
    extreme_heat: float      # °C
    cyclone_wind: float      # km/h
    storm_wind: float        # km/h
    heavy_rain_24h: float    # mm
    heavy_rain_48h: float    # mm


THRESHOLDS: Dict[IndustryType, IndustryThresholds] = {
    IndustryType.MINING: IndustryThresholds(
        extreme_heat=45.0,
        cyclone_wind=90.0,
        storm_wind=60.0,
        heavy_rain_24h=40.0,
        heavy_rain_48h=60.0,
    ),
    IndustryType.GENERAL: IndustryThresholds(
        extreme_heat=45.0,
        cyclone_wind=90.0,
        storm_wind=50.0,
        heavy_rain_24h=25.0,
        heavy_rain_48h=40.0,
    ),
}

# Wind speeds that promote an event's severity one level
CYCLONE_ALERT_WIND = 120.0
STORM_WARNING_WIND = 70.0
STORM_MIN_RAIN = 10.0


def coerce_industry(industry: Union[IndustryType, str]) -> IndustryType:
    """Unknown industries are treated as general."""
    try:
        return IndustryType(industry)
    except ValueError:
        return IndustryType.GENERAL


def get_thresholds(industry: Union[IndustryType, str]) -> IndustryThresholds:
    return THRESHOLDS[coerce_industry(industry)]
