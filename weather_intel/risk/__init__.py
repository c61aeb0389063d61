"""risk – extreme weather, road access and operation-window analysis."""
from .thresholds import IndustryType, IndustryThresholds, get_thresholds
from .regions import RegionConfig, detect_region, get_region_config, has_road_closure_risk
from .extreme_weather import (
    ExtremeWeatherDetector,
    ExtremeWeatherEvent,
    EventType,
    Severity,
    WeatherImpact,
    highest_severity,
    next_event_date,
)
from .road_risk import (
    AccessWindow,
    RoadProfile,
    RoadRiskAssessment,
    RoadRiskCalculator,
    RoadRiskLevel,
    RoadType,
    find_access_windows,
)
from .operations import (
    FuelImpact,
    Operation,
    OperationWindow,
    OperationsPredictor,
    WindowStatus,
    count_good_work_days,
)

__all__ = [
    "IndustryType", "IndustryThresholds", "get_thresholds",
    "RegionConfig", "detect_region", "get_region_config", "has_road_closure_risk",
    "ExtremeWeatherDetector", "ExtremeWeatherEvent", "EventType", "Severity",
    "WeatherImpact", "highest_severity", "next_event_date",
    "AccessWindow", "RoadProfile", "RoadRiskAssessment", "RoadRiskCalculator",
    "RoadRiskLevel", "RoadType", "find_access_windows",
    "FuelImpact", "Operation", "OperationWindow", "OperationsPredictor",
    "WindowStatus", "count_good_work_days",
]
