"""
main.py – command-line entry point for the weather intelligence engine.

Usage
-----
    weather-intel --lat -22.31 --lon 118.60 --industry mining
    weather-intel --lat -31.95 --lon 115.86 --days 14 --json
    weather-intel --lat -30.75 --lon 121.47 --tank-level 12000 --daily-usage 2500
    weather-intel --search Kalgoorlie
    weather-intel --lat -31.95 --lon 115.86 --observations

Environment
-----------
Copy .env.example → .env to override provider URLs, cache TTLs and the
request timeout.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from weather_intel.config import AppConfig
from weather_intel.data.weather import WeatherService
from weather_intel.risk import (
    ExtremeWeatherDetector,
    IndustryType,
    OperationsPredictor,
    RoadProfile,
    RoadRiskCalculator,
    find_access_windows,
    has_road_closure_risk,
    highest_severity,
)
from weather_intel.utils.logger import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Weather intelligence and operations-risk engine"
    )
    parser.add_argument("--lat", type=float, help="Site latitude")
    parser.add_argument("--lon", type=float, help="Site longitude")
    parser.add_argument("--days", type=int, default=7,
                        help="Forecast days (default: 7; >7 fuses providers)")
    parser.add_argument("--industry", default="mining",
                        choices=[i.value for i in IndustryType],
                        help="Threshold table to use (default: mining)")
    parser.add_argument("--road-threshold", type=float, default=35.0,
                        help="48h rainfall (mm) that closes the access road")
    parser.add_argument("--closure-days", type=float, default=3.0,
                        help="Typical closure duration in days")
    parser.add_argument("--alt-route", action="store_true",
                        help="An alternative access route exists")
    parser.add_argument("--tank-level", type=float, default=None,
                        help="Current tank level in litres (enables road risk)")
    parser.add_argument("--daily-usage", type=float, default=0.0,
                        help="Daily consumption in litres")
    parser.add_argument("--search", default=None,
                        help="Look up a location by name and exit")
    parser.add_argument("--observations", action="store_true",
                        help="Print current observations instead of a forecast")
    parser.add_argument("--json", action="store_true",
                        help="Emit JSON on stdout")
    parser.add_argument("--log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging verbosity (default: LOG_LEVEL or INFO)")
    parser.add_argument("--log-file", default=None,
                        help="Optional path to write logs to")
    parser.add_argument("--provider-log-level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Separate level for the weather provider clients")
    return parser.parse_args(argv)


def _emit(payload: dict, as_json: bool) -> None:
    if as_json:
        print(json.dumps(payload, indent=2))
        return
    for section, value in payload.items():
        print(f"== {section}")
        items = value if isinstance(value, list) else [value]
        for item in items:
            print(f"  {item}")


def run(args: argparse.Namespace, service: WeatherService) -> int:
    if args.search:
        match = service.search_location(args.search)
        if match is None:
            logger.error("No location found for %r", args.search)
            return 1
        _emit({"location": {"geokey": match.geokey, "name": match.name,
                            "region": match.region}}, args.json)
        return 0

    if args.lat is None or args.lon is None:
        logger.error("--lat and --lon are required")
        return 2

    if args.observations:
        obs = service.get_observations(args.lat, args.lon)
        if obs is None:
            logger.error("Observations unavailable for (%.4f, %.4f)", args.lat, args.lon)
            return 1
        _emit({"observations": obs.to_dict()}, args.json)
        return 0

    forecast = service.get_forecast(args.lat, args.lon, days=args.days)
    if forecast is None:
        logger.error("Forecast unavailable for (%.4f, %.4f)", args.lat, args.lon)
        return 1

    events = ExtremeWeatherDetector().detect_events(
        forecast, args.industry, args.lat, args.lon
    )
    windows = OperationsPredictor().predict_all(forecast)
    payload: dict = {
        "forecast": str(forecast),
        "highest_severity": getattr(highest_severity(events), "value", None),
        "events": [e.to_dict() if args.json else str(e) for e in events],
        "operations": [w.to_dict() if args.json else str(w) for w in windows],
        "access_windows": [
            f"{w.start_date} → {w.end_date} ({w.days}d)"
            for w in find_access_windows(forecast)
        ],
        "road_closure_region": has_road_closure_risk(args.lat, args.lon),
    }

    if args.tank_level is not None:
        profile = RoadProfile(
            closure_threshold_mm=args.road_threshold,
            typical_closure_duration_days=args.closure_days,
            alternative_route_available=args.alt_route,
        )
        risk = RoadRiskCalculator().assess_risk(
            forecast, profile, args.tank_level, args.daily_usage
        )
        payload["road_risk"] = risk.to_dict() if args.json else (
            f"{risk.risk_level.value} ({risk.probability}%) – {risk.reasoning}"
        )

    _emit(payload, args.json)
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)

    try:
        cfg = AppConfig.load()
    except EnvironmentError as exc:
        setup_logging(level="ERROR")
        logger.error("Configuration error: %s", exc)
        sys.exit(1)

    setup_logging(
        level=args.log_level or cfg.log_level,
        log_file=args.log_file,
        provider_level=args.provider_log_level,
    )
    service = WeatherService.from_config(cfg)
    sys.exit(run(args, service))


if __name__ == "__main__":
    main()
