"""
risk.extreme_weather – extreme weather event detection.

Scans the daily series of a WeatherForecast for events that matter to
mining and general/industrial fuel customers:

  • Extreme heat   – equipment derating, worker safety, higher fuel burn
  • Cyclone        – Pilbara mining sites only; site shutdown
  • Storm          – high wind + rain below cyclone strength
  • Heavy rain     – site/road access; only where rain actually disrupts
                     access, or when it reaches severe-flood levels

Heat days are coalesced into multi-day events.  Cyclone, storm and rain
events are one day each.  Output is sorted alert → warning → watch, then
by start date.

All functions are pure; the detector keeps no state between calls.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import List, Optional, Union

from weather_intel.data.weather.base import DailyPoint, WeatherForecast, to_jsonable

from .regions import RegionConfig, is_cyclone_region, region_config_for
from .thresholds import (
    CYCLONE_ALERT_WIND,
    STORM_MIN_RAIN,
    STORM_WARNING_WIND,
    IndustryThresholds,
    IndustryType,
    coerce_industry,
    get_thresholds,
)

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    HEAT = "heat"
    CYCLONE = "cyclone"
    STORM = "storm"
    HEAVY_RAIN = "heavy_rain"


class Severity(str, Enum):
    WATCH = "watch"
    WARNING = "warning"
    ALERT = "alert"


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


_SEVERITY_ORDER = {Severity.ALERT: 0, Severity.WARNING: 1, Severity.WATCH: 2}

HEAT_ALERT_DAYS = 3


@dataclass
class WeatherImpact:
    equipment_risk: RiskLevel
    site_access_risk: RiskLevel
    worker_safety_risk: RiskLevel
    fuel_consumption_multiplier: float   # 1.0 = normal, 1.2 = 20 % increase
    advisory: str


@dataclass
class ExtremeWeatherEvent:
    type: EventType
    severity: Severity
    start_date: date
    end_date: date
    peak_value: float        # °C, km/h or mm depending on type
    impact: WeatherImpact
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return to_jsonable(asdict(self))

    def __str__(self) -> str:
        return (
            f"ExtremeWeatherEvent({self.type.value} {self.severity.value} "
            f"{self.start_date}→{self.end_date} peak={self.peak_value:.0f})"
        )


class ExtremeWeatherDetector:
    """
    Usage
    -----
    detector = ExtremeWeatherDetector()
    events = detector.detect_events(forecast, IndustryType.MINING, -22.3, 118.6)
    """

    def detect_events(
        self,
        forecast: WeatherForecast,
        industry_type: Union[IndustryType, str],
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        region: Optional[RegionConfig] = None,
    ) -> List[ExtremeWeatherEvent]:
        """
        Detect all extreme weather events in the forecast.

        `region` overrides the region detected from the coordinate.
        """
        industry = coerce_industry(industry_type)
        thresholds = get_thresholds(industry)
        region_cfg = region or region_config_for(latitude, longitude)
        daily = forecast.daily

        events: List[ExtremeWeatherEvent] = []
        events.extend(self.detect_extreme_heat(daily, thresholds, industry))
        if industry == IndustryType.MINING and is_cyclone_region(latitude, longitude):
            events.extend(self.detect_cyclones(daily, thresholds))
        events.extend(self.detect_storms(daily, thresholds, industry))
        events.extend(self.detect_heavy_rain(daily, thresholds, industry, region_cfg))

        events.sort(key=lambda e: (_SEVERITY_ORDER[e.severity], e.start_date))
        logger.debug("Detected %d extreme weather events (%s, region=%s)",
                     len(events), industry.value, region_cfg.region)
        return events

    # ── Heat ──────────────────────────────────────────────────────────────────

    def detect_extreme_heat(
        self,
        daily: List[DailyPoint],
        thresholds: IndustryThresholds,
        industry: IndustryType,
    ) -> List[ExtremeWeatherEvent]:
        events: List[ExtremeWeatherEvent] = []
        run: List[DailyPoint] = []

        for day in daily:
            if day.temp_max >= thresholds.extreme_heat:
                run.append(day)
            elif run:
                events.append(self._heat_event(run, industry))
                run = []

        # Event still in progress at the end of the forecast
        if run:
            events.append(self._heat_event(run, industry))
        return events

    def _heat_event(self, run: List[DailyPoint], industry: IndustryType) -> ExtremeWeatherEvent:
        peak = max(d.temp_max for d in run)
        severity = Severity.ALERT if len(run) >= HEAT_ALERT_DAYS else Severity.WARNING

        if industry == IndustryType.MINING:
            recommendations = [
                "Schedule equipment cooling breaks during peak heat",
                "Expect ~20% higher fuel consumption for generators/cooling",
                "Consider delivery before heat wave",
            ]
        else:
            recommendations = [
                "Limit outdoor operations during peak heat hours",
                "Ensure cooling equipment is operational",
            ]

        return ExtremeWeatherEvent(
            type=EventType.HEAT,
            severity=severity,
            start_date=run[0].date,
            end_date=run[-1].date,
            peak_value=peak,
            impact=WeatherImpact(
                equipment_risk=RiskLevel.HIGH,
                site_access_risk=RiskLevel.LOW,
                worker_safety_risk=RiskLevel.HIGH,
                fuel_consumption_multiplier=1.2,
                advisory=f"Extreme heat of {peak:.0f}°C expected. "
                         f"Equipment efficiency will be reduced.",
            ),
            recommendations=recommendations,
        )

    # ── Cyclone ───────────────────────────────────────────────────────────────

    def detect_cyclones(
        self,
        daily: List[DailyPoint],
        thresholds: IndustryThresholds,
    ) -> List[ExtremeWeatherEvent]:
        events: List[ExtremeWeatherEvent] = []
        for day in daily:
            wind = day.wind_speed_max
            if wind < thresholds.cyclone_wind:
                continue
            events.append(ExtremeWeatherEvent(
                type=EventType.CYCLONE,
                severity=Severity.ALERT if wind >= CYCLONE_ALERT_WIND else Severity.WARNING,
                start_date=day.date,
                end_date=day.date + timedelta(days=1),
                peak_value=wind,
                impact=WeatherImpact(
                    equipment_risk=RiskLevel.HIGH,
                    site_access_risk=RiskLevel.HIGH,
                    worker_safety_risk=RiskLevel.HIGH,
                    fuel_consumption_multiplier=0.5,   # reduced operations
                    advisory=f"Cyclonic conditions with {wind:.0f}km/h winds and "
                             f"{day.rain_sum:.0f}mm rain expected.",
                ),
                recommendations=[
                    "Secure all equipment and materials",
                    "Consider site evacuation per safety protocols",
                    "Ensure emergency fuel reserves are adequate",
                    "Plan for multi-day site closure",
                ],
            ))
        return events

    # ── Storm ─────────────────────────────────────────────────────────────────

    def detect_storms(
        self,
        daily: List[DailyPoint],
        thresholds: IndustryThresholds,
        industry: IndustryType,
    ) -> List[ExtremeWeatherEvent]:
        if industry == IndustryType.MINING:
            recommendations = [
                "Secure loose equipment and materials",
                "Monitor road conditions closely",
                "Be prepared for temporary site access disruption",
            ]
        else:
            recommendations = [
                "Secure outdoor equipment",
                "Check site drainage",
                "Consider rescheduling outdoor deliveries",
            ]

        events: List[ExtremeWeatherEvent] = []
        for day in daily:
            wind, rain = day.wind_speed_max, day.rain_sum
            if not (thresholds.storm_wind <= wind < thresholds.cyclone_wind and rain >= STORM_MIN_RAIN):
                continue
            events.append(ExtremeWeatherEvent(
                type=EventType.STORM,
                severity=Severity.WARNING if wind >= STORM_WARNING_WIND else Severity.WATCH,
                start_date=day.date,
                end_date=day.date + timedelta(days=1),
                peak_value=wind,
                impact=WeatherImpact(
                    equipment_risk=RiskLevel.MODERATE,
                    site_access_risk=RiskLevel.MODERATE,
                    worker_safety_risk=RiskLevel.MODERATE,
                    fuel_consumption_multiplier=0.9,
                    advisory=f"Storm conditions with {wind:.0f}km/h winds and "
                             f"{rain:.0f}mm rain expected.",
                ),
                recommendations=list(recommendations),
            ))
        return events

    # ── Heavy rain ────────────────────────────────────────────────────────────

    def detect_heavy_rain(
        self,
        daily: List[DailyPoint],
        thresholds: IndustryThresholds,
        industry: IndustryType,
        region: RegionConfig,
    ) -> List[ExtremeWeatherEvent]:
        events: List[ExtremeWeatherEvent] = []
        for day in daily:
            rain = day.rain_sum
            severe = rain >= region.severe_flood_threshold_mm
            if not (region.cares_about_rain or severe):
                continue
            if rain < thresholds.heavy_rain_24h:
                continue

            if severe:
                severity = Severity.ALERT
            elif rain >= thresholds.heavy_rain_48h:
                severity = Severity.WARNING
            else:
                severity = Severity.WATCH

            if severe:
                recommendations = [
                    "Severe flooding risk - check road conditions",
                    "Consider scheduling delivery before flood event",
                    "Monitor emergency services for road closures",
                ]
                advisory = f"Severe rainfall of {rain:.0f}mm expected. Significant flooding risk."
            elif industry == IndustryType.MINING and region.cares_about_rain:
                recommendations = [
                    "Monitor access road conditions",
                    "Prepare for potential road closure",
                    "Consider scheduling delivery before rain event"
                    if rain >= thresholds.heavy_rain_48h
                    else "Keep monitoring forecasts",
                ]
                advisory = f"Heavy rain of {rain:.0f}mm expected. May affect access roads."
            else:
                recommendations = [
                    "Check site drainage and sump pumps",
                    "Review outdoor equipment protection",
                ]
                advisory = (
                    f"Heavy rain of {rain:.0f}mm expected. May affect access roads."
                    if region.cares_about_rain
                    else f"Heavy rain of {rain:.0f}mm expected."
                )

            events.append(ExtremeWeatherEvent(
                type=EventType.HEAVY_RAIN,
                severity=severity,
                start_date=day.date,
                end_date=day.date + timedelta(days=1),
                peak_value=rain,
                impact=WeatherImpact(
                    equipment_risk=RiskLevel.LOW,
                    site_access_risk=RiskLevel.HIGH
                    if region.cares_about_rain or severe else RiskLevel.LOW,
                    worker_safety_risk=RiskLevel.MODERATE if severe else RiskLevel.LOW,
                    fuel_consumption_multiplier=1.0,
                    advisory=advisory,
                ),
                recommendations=recommendations,
            ))
        return events


# ── Summaries ─────────────────────────────────────────────────────────────────

def highest_severity(events: List[ExtremeWeatherEvent]) -> Optional[Severity]:
    if not events:
        return None
    return min((e.severity for e in events), key=_SEVERITY_ORDER.__getitem__)


def next_event_date(events: List[ExtremeWeatherEvent]) -> Optional[date]:
    if not events:
        return None
    return min(e.start_date for e in events)
