"""
risk.regions – geography-aware alert policy.

Rain only disrupts fuel delivery where access roads are unsealed and
remote (Goldfields around Kalgoorlie, the Pilbara).  Elsewhere a 30 mm day
is a non-event unless it reaches the region's severe-flood threshold.

Regions are matched by bounding box in declaration order; the first match
wins, anything else is "default".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class RegionConfig:
    region: str
    cares_about_rain: bool
    severe_flood_threshold_mm: float
    has_road_closure_risk: bool = False


# (lat_min, lat_max, lon_min, lon_max)
_REGION_BOUNDS: Dict[str, Tuple[float, float, float, float]] = {
    "pilbara":    (-23.5, -20.0, 115.5, 121.0),
    "kalgoorlie": (-32.0, -29.0, 120.0, 123.0),
    "perth":      (-32.6, -31.4, 115.6, 116.3),
    "geraldton":  (-29.2, -28.4, 114.4, 115.0),
    "wheatbelt":  (-33.5, -29.0, 115.5, 119.5),
}

REGION_CONFIGS: Dict[str, RegionConfig] = {
    "pilbara": RegionConfig("pilbara", True, 100.0, has_road_closure_risk=True),
    "kalgoorlie": RegionConfig("kalgoorlie", True, 80.0, has_road_closure_risk=True),
    "perth": RegionConfig("perth", False, 80.0),
    "geraldton": RegionConfig("geraldton", False, 80.0),
    "wheatbelt": RegionConfig("wheatbelt", False, 80.0),
    "default": RegionConfig("default", False, 80.0),
}

# Cyclone-prone sub-region (same box as the Pilbara)
_CYCLONE_BOUNDS = _REGION_BOUNDS["pilbara"]


def _inside(lat: float, lon: float, box: Tuple[float, float, float, float]) -> bool:
    lat_min, lat_max, lon_min, lon_max = box
    return lat_min <= lat <= lat_max and lon_min <= lon <= lon_max


def detect_region(latitude: Optional[float], longitude: Optional[float]) -> str:
    if latitude is None or longitude is None:
        return "default"
    for name, box in _REGION_BOUNDS.items():
        if _inside(latitude, longitude, box):
            return name
    return "default"


def get_region_config(region: str) -> RegionConfig:
    return REGION_CONFIGS.get(region, REGION_CONFIGS["default"])


def region_config_for(latitude: Optional[float], longitude: Optional[float]) -> RegionConfig:
    return get_region_config(detect_region(latitude, longitude))


def is_cyclone_region(latitude: Optional[float], longitude: Optional[float]) -> bool:
    if latitude is None or longitude is None:
        return False
    return _inside(latitude, longitude, _CYCLONE_BOUNDS)


def has_road_closure_risk(latitude: Optional[float], longitude: Optional[float]) -> bool:
    return region_config_for(latitude, longitude).has_road_closure_risk
