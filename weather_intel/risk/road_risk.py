"""
risk.road_risk – access road closure risk and fuel survivability.

Given a forecast, the site's road profile and its current tank state,
estimate how likely the access road is to close in the next 48 h, when it
closes, and whether the fuel on site outlasts a typical closure.

Closure probability is a step function of rainfall_48h / closure_threshold:

    ratio ≥ 1.2 → 95      ratio ≥ 1.0 → 80      ratio ≥ 0.8 → 60
    ratio ≥ 0.5 → 30      otherwise   → 10

Risk level
----------
critical : rain reaches the threshold and days of supply ≤ closure duration
high     : rain reaches the threshold, supply outlasts the closure
moderate : probability > 50 but rain still below the threshold
low      : everything else
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Union

import numpy as np

from weather_intel.data.weather.base import WeatherForecast, to_jsonable

logger = logging.getLogger(__name__)

_HOURS_AHEAD = 48
_MIN_CONSUMPTION = 1e-6   # below this, supply is treated as unlimited

# (ratio floor, probability) – checked top-down
_PROBABILITY_STEPS = [(1.2, 95), (1.0, 80), (0.8, 60), (0.5, 30)]
_BASE_PROBABILITY = 10


class RoadType(str, Enum):
    SEALED = "sealed"
    GRAVEL = "gravel"
    UNSEALED = "unsealed"


class RoadRiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class RoadProfile:
    """Supplied by the fleet configuration; read-only here."""
    access_road_type: RoadType = RoadType.UNSEALED
    closure_threshold_mm: float = 35.0
    typical_closure_duration_days: float = 3.0
    alternative_route_available: bool = False


@dataclass
class RoadRiskAssessment:
    risk_level: RoadRiskLevel
    probability: int                          # 0–100
    estimated_closure_date: Optional[Union[datetime, date]]
    estimated_closure_duration: float         # days; 0 when no closure expected
    rainfall_48h: float
    days_of_supply: float
    reasoning: str
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return to_jsonable(asdict(self))


@dataclass
class AccessWindow:
    """A run of days dry enough for trucks to reach site."""
    start_date: date
    end_date: date
    days: int


def closure_probability(rainfall_48h: float, closure_threshold_mm: float) -> int:
    if closure_threshold_mm <= 0:
        return _PROBABILITY_STEPS[0][1]
    ratio = rainfall_48h / closure_threshold_mm
    for floor, probability in _PROBABILITY_STEPS:
        if ratio >= floor:
            return probability
    return _BASE_PROBABILITY


class RoadRiskCalculator:

    def assess_risk(
        self,
        forecast: WeatherForecast,
        road_profile: RoadProfile,
        current_tank_level: float,
        daily_consumption: float,
    ) -> RoadRiskAssessment:
        threshold = road_profile.closure_threshold_mm
        closure_days = road_profile.typical_closure_duration_days

        rainfall_48h = self._rainfall_48h(forecast)
        probability = closure_probability(rainfall_48h, threshold)
        closure_date = self._closure_date(forecast, threshold)

        if daily_consumption <= _MIN_CONSUMPTION:
            days_of_supply = float("inf")
        else:
            days_of_supply = current_tank_level / daily_consumption

        exceeds = rainfall_48h >= threshold
        if exceeds and days_of_supply <= closure_days:
            level = RoadRiskLevel.CRITICAL
        elif exceeds:
            level = RoadRiskLevel.HIGH
        elif probability > 50:
            level = RoadRiskLevel.MODERATE
        else:
            level = RoadRiskLevel.LOW

        reasoning = self._reasoning(level, rainfall_48h, threshold, days_of_supply,
                                    road_profile)
        recommendations = self._recommendations(level, closure_date, days_of_supply,
                                                road_profile)

        logger.debug(
            "Road risk: level=%s prob=%d rain48h=%.1f threshold=%.1f supply=%.1fd",
            level.value, probability, rainfall_48h, threshold, days_of_supply,
        )
        return RoadRiskAssessment(
            risk_level=level,
            probability=probability,
            estimated_closure_date=closure_date,
            estimated_closure_duration=closure_days if closure_date is not None else 0.0,
            rainfall_48h=rainfall_48h,
            days_of_supply=days_of_supply,
            reasoning=reasoning,
            recommendations=recommendations,
        )

    # ── Rainfall ──────────────────────────────────────────────────────────────

    def _rainfall_48h(self, forecast: WeatherForecast) -> float:
        if forecast.hourly:
            rain = np.array([h.rain for h in forecast.hourly[:_HOURS_AHEAD]], dtype=float)
        else:
            # No hourly data: the first two days stand in for 48 h
            rain = np.array([d.rain_sum for d in forecast.daily[:2]], dtype=float)
        return float(rain.sum())

    def _closure_date(
        self,
        forecast: WeatherForecast,
        threshold: float,
    ) -> Optional[Union[datetime, date]]:
        """First time cumulative rainfall reaches the closure threshold."""
        if forecast.hourly:
            stamps = [h.timestamp for h in forecast.hourly]
            rain = np.array([h.rain for h in forecast.hourly], dtype=float)
        else:
            stamps = [d.date for d in forecast.daily]
            rain = np.array([d.rain_sum for d in forecast.daily], dtype=float)
        if rain.size == 0:
            return None

        crossed = np.cumsum(rain) >= threshold
        if not crossed.any():
            return None
        return stamps[int(np.argmax(crossed))]

    # ── Text ──────────────────────────────────────────────────────────────────

    @staticmethod
    def _supply_text(days_of_supply: float) -> str:
        if days_of_supply == float("inf"):
            return "unlimited supply (no measurable consumption)"
        return f"{days_of_supply:.1f} days of supply"

    def _reasoning(
        self,
        level: RoadRiskLevel,
        rainfall_48h: float,
        threshold: float,
        days_of_supply: float,
        profile: RoadProfile,
    ) -> str:
        road = f"{RoadType(profile.access_road_type).value} access road"
        supply = self._supply_text(days_of_supply)
        if level == RoadRiskLevel.CRITICAL:
            return (
                f"{rainfall_48h:.0f}mm forecast in 48h exceeds the {threshold:.0f}mm closure "
                f"threshold for the {road}. Site has {supply}, less than the typical "
                f"{profile.typical_closure_duration_days:.0f}-day closure."
            )
        if level == RoadRiskLevel.HIGH:
            return (
                f"{rainfall_48h:.0f}mm forecast in 48h exceeds the {threshold:.0f}mm closure "
                f"threshold for the {road}. Site has {supply}, enough to ride out a "
                f"{profile.typical_closure_duration_days:.0f}-day closure."
            )
        if level == RoadRiskLevel.MODERATE:
            return (
                f"{rainfall_48h:.0f}mm forecast in 48h is approaching the {threshold:.0f}mm "
                f"closure threshold for the {road}."
            )
        return (
            f"{rainfall_48h:.0f}mm forecast in 48h is well below the {threshold:.0f}mm "
            f"closure threshold."
        )

    def _recommendations(
        self,
        level: RoadRiskLevel,
        closure_date: Optional[Union[datetime, date]],
        days_of_supply: float,
        profile: RoadProfile,
    ) -> List[str]:
        when = f" before {closure_date:%a %d %b}" if closure_date is not None else ""
        recs: List[str]
        if level == RoadRiskLevel.CRITICAL:
            recs = [
                f"Order fuel immediately – deliver{when}",
                f"Current {self._supply_text(days_of_supply)} will not last the closure",
                "Reduce non-essential consumption until access is restored",
            ]
        elif level == RoadRiskLevel.HIGH:
            recs = [
                f"Consider a top-up delivery{when}",
                "Monitor road condition reports",
            ]
        elif level == RoadRiskLevel.MODERATE:
            recs = [
                "Monitor rainfall forecasts over the next 48h",
                "Confirm delivery schedule with carrier",
            ]
        else:
            return ["No road access concerns in the next 48h"]

        if profile.alternative_route_available:
            recs.append("Alternative route available – confirm with carrier")
        else:
            recs.append("No alternative route – plan deliveries around the closure")
        return recs


def find_access_windows(
    forecast: WeatherForecast,
    max_daily_rain_mm: float = 10.0,
    min_days: int = 2,
) -> List[AccessWindow]:
    """Runs of ≥ min_days consecutive days with rain below max_daily_rain_mm."""
    windows: List[AccessWindow] = []
    run_start: Optional[int] = None
    daily = forecast.daily

    for idx, day in enumerate(daily):
        if day.rain_sum < max_daily_rain_mm:
            if run_start is None:
                run_start = idx
            continue
        if run_start is not None and idx - run_start >= min_days:
            windows.append(AccessWindow(daily[run_start].date, daily[idx - 1].date,
                                        idx - run_start))
        run_start = None

    if run_start is not None and len(daily) - run_start >= min_days:
        windows.append(AccessWindow(daily[run_start].date, daily[-1].date,
                                    len(daily) - run_start))
    return windows
