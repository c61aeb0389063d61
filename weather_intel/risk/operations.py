"""
risk.operations – agricultural operation windows and their fuel impact.

Three predictors, each returning at most one OperationWindow:

  harvest   (Sep–Dec) : first run of 7 dry days (rain < 2 mm).  Headers
                        burn ~800 L/day, 2.5x normal consumption.
  seeding   (Mar–Jul) : the "break" – first day with ≥ 20 mm rain.  Seeding
                        starts 3 days later and runs ~7 days at ~300 L/day.
  spraying  (any)     : first run of ≥ 2 calm, dry days (wind < 15 km/h,
                        rain < 1 mm) inside the first forecast week.
                        Spray rigs use ~120 L/day.

Season gating uses the calendar month of `today`, not of the forecast.
Forecasts shorter than a lookback simply produce no window.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Callable, List, Optional, Tuple

from weather_intel.data.weather.base import DailyPoint, WeatherForecast, to_jsonable

logger = logging.getLogger(__name__)

HARVEST_MONTHS = range(9, 13)
SEEDING_MONTHS = range(3, 8)

HARVEST_DRY_RAIN_MM = 2.0
HARVEST_WINDOW_DAYS = 7
HARVEST_LOOKAHEAD_DAYS = 7
HARVEST_RAIN_WARNING_MM = 15.0

SEEDING_BREAK_RAIN_MM = 20.0
SEEDING_DELAY_DAYS = 3
SEEDING_WINDOW_DAYS = 7

SPRAY_MAX_WIND_KMH = 15.0
SPRAY_MAX_RAIN_MM = 1.0
SPRAY_MIN_DAYS = 2
SPRAY_LOOKAHEAD_DAYS = 7


class Operation(str, Enum):
    HARVEST = "harvest"
    SEEDING = "seeding"
    SPRAYING = "spraying"


class WindowStatus(str, Enum):
    OPENING = "opening"
    OPTIMAL = "optimal"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class FuelImpact:
    expected_multiplier: float
    estimated_daily_usage: float     # litres/day
    estimated_total_usage: float     # litres over the window


@dataclass
class OperationWindow:
    operation: Operation
    status: WindowStatus
    start_date: date
    end_date: date
    confidence: int                  # 0–100
    reasoning: str
    fuel_impact: FuelImpact
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return to_jsonable(asdict(self))

    def __str__(self) -> str:
        return (
            f"OperationWindow({self.operation.value} {self.status.value} "
            f"{self.start_date}→{self.end_date} conf={self.confidence})"
        )


def _first_run(
    days: List[DailyPoint],
    qualifies: Callable[[DailyPoint], bool],
    min_length: int,
    extend: bool = False,
) -> Optional[Tuple[int, int]]:
    """
    (start, end) indices, inclusive, of the first run of ≥ min_length
    qualifying days.  The run stops at min_length unless `extend` is set,
    in which case it covers every consecutive qualifying day.
    """
    start: Optional[int] = None
    for idx, day in enumerate(days):
        if not qualifies(day):
            start = None
            continue
        if start is None:
            start = idx
        if idx - start + 1 < min_length:
            continue
        if not extend:
            return start, idx
        end = idx
        while end + 1 < len(days) and qualifies(days[end + 1]):
            end += 1
        return start, end
    return None


class OperationsPredictor:
    """
    Usage
    -----
    predictor = OperationsPredictor()
    windows = predictor.predict_all(forecast)
    """

    def predict_harvest(
        self,
        forecast: WeatherForecast,
        today: Optional[date] = None,
    ) -> Optional[OperationWindow]:
        today = today or date.today()
        if today.month not in HARVEST_MONTHS:
            return None

        daily = forecast.daily
        run = _first_run(daily, lambda d: d.rain_sum < HARVEST_DRY_RAIN_MM, HARVEST_WINDOW_DAYS)
        if run is None:
            logger.debug("Harvest: no %d-day dry window in %d-day forecast",
                         HARVEST_WINDOW_DAYS, len(daily))
            return None

        start, end = run
        after = daily[end + 1:end + 1 + HARVEST_LOOKAHEAD_DAYS]
        rain_after = sum(d.rain_sum for d in after)
        days = end - start + 1

        recommendations = [
            f"Fill header and chaser bin tanks before {daily[start].date:%d %b}",
            "Expect ~800L/day per header during the window",
        ]
        if rain_after > HARVEST_RAIN_WARNING_MM:
            recommendations.append(
                f"Deliver fuel before {daily[end].date:%d %b} – {rain_after:.0f}mm rain "
                f"expected in the following week"
            )

        return OperationWindow(
            operation=Operation.HARVEST,
            status=WindowStatus.OPTIMAL,
            start_date=daily[start].date,
            end_date=daily[end].date,
            confidence=85,
            reasoning=(
                f"{days} consecutive dry days (<{HARVEST_DRY_RAIN_MM:.0f}mm) forecast; "
                f"{rain_after:.0f}mm expected in the {len(after)} days after."
            ),
            fuel_impact=FuelImpact(
                expected_multiplier=2.5,
                estimated_daily_usage=800.0,
                estimated_total_usage=800.0 * days,
            ),
            recommendations=recommendations,
        )

    def predict_seeding(
        self,
        forecast: WeatherForecast,
        today: Optional[date] = None,
    ) -> Optional[OperationWindow]:
        today = today or date.today()
        if today.month not in SEEDING_MONTHS:
            return None

        daily = forecast.daily
        break_day = next((d for d in daily if d.rain_sum >= SEEDING_BREAK_RAIN_MM), None)

        if break_day is None:
            return OperationWindow(
                operation=Operation.SEEDING,
                status=WindowStatus.CLOSED,
                start_date=daily[0].date if daily else today,
                end_date=daily[-1].date if daily else today,
                confidence=0,
                reasoning=(
                    f"Waiting for the break – no {SEEDING_BREAK_RAIN_MM:.0f}mm+ rain "
                    f"event in the forecast."
                ),
                fuel_impact=FuelImpact(
                    expected_multiplier=1.0,
                    estimated_daily_usage=0.0,
                    estimated_total_usage=0.0,
                ),
                recommendations=["Keep monitoring forecasts for the autumn break"],
            )

        start = break_day.date + timedelta(days=SEEDING_DELAY_DAYS)
        end = start + timedelta(days=SEEDING_WINDOW_DAYS - 1)
        return OperationWindow(
            operation=Operation.SEEDING,
            status=WindowStatus.OPENING,
            start_date=start,
            end_date=end,
            confidence=80,
            reasoning=(
                f"Break of {break_day.rain_sum:.0f}mm expected {break_day.date:%a %d %b}; "
                f"seeding typically starts {SEEDING_DELAY_DAYS} days later."
            ),
            fuel_impact=FuelImpact(
                expected_multiplier=1.8,
                estimated_daily_usage=300.0,
                estimated_total_usage=300.0 * SEEDING_WINDOW_DAYS,
            ),
            recommendations=[
                f"Order fuel before {start:%d %b}",
                "Expect ~300L/day for seeding rigs",
            ],
        )

    def predict_spraying(
        self,
        forecast: WeatherForecast,
        today: Optional[date] = None,
    ) -> Optional[OperationWindow]:
        week = forecast.daily[:SPRAY_LOOKAHEAD_DAYS]
        run = _first_run(
            week,
            lambda d: d.wind_speed_max < SPRAY_MAX_WIND_KMH and d.rain_sum < SPRAY_MAX_RAIN_MM,
            SPRAY_MIN_DAYS,
            extend=True,
        )
        if run is None:
            return None

        start, end = run
        days = end - start + 1
        calmest = min(week[start:end + 1], key=lambda d: d.wind_speed_max)
        return OperationWindow(
            operation=Operation.SPRAYING,
            status=WindowStatus.OPTIMAL,
            start_date=week[start].date,
            end_date=week[end].date,
            confidence=75,
            reasoning=(
                f"{days} consecutive days with wind <{SPRAY_MAX_WIND_KMH:.0f}km/h and no rain; "
                f"calmest {calmest.date:%a} at {calmest.wind_speed_max:.0f}km/h."
            ),
            fuel_impact=FuelImpact(
                expected_multiplier=1.3,
                estimated_daily_usage=120.0,
                estimated_total_usage=120.0 * days,
            ),
            recommendations=[
                f"Spray from {week[start].date:%a %d %b}",
                "Spray rigs use ~120L/day",
            ],
        )

    def predict_all(
        self,
        forecast: WeatherForecast,
        today: Optional[date] = None,
    ) -> List[OperationWindow]:
        predictions = (
            self.predict_harvest(forecast, today),
            self.predict_seeding(forecast, today),
            self.predict_spraying(forecast, today),
        )
        return [w for w in predictions if w is not None]


def count_good_work_days(forecast: WeatherForecast, industry: str, days: int = 7) -> int:
    """Days in the first `days` suitable for field, road or site work."""
    week = forecast.daily[:days]
    industry = (industry or "").lower()
    if industry == "agriculture":
        return sum(1 for d in week if d.rain_sum < 2 and d.wind_speed_max < 20)
    if industry == "mining":
        return sum(1 for d in week if d.rain_sum < 20)
    if industry == "construction":
        return sum(1 for d in week if d.rain_sum < 5)
    return len(week)
