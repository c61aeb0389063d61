"""
data.weather.geokey – geohash encoding for cache keys and provider lookups.

A geokey is a base-32 geohash: latitude and longitude intervals are halved
alternately (longitude first) and each 5 bits of the resulting bit stream
map to one character.  Precision 7 gives a cell of roughly 153 m x 153 m,
which is what the forecast cache keys on.

Decoding returns the midpoint of the key's bounding cell, so a round trip
only recovers the coordinate to the resolution of the cell.
"""

from __future__ import annotations

from typing import Tuple

from .base import GeoCoordinate

_BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
_DECODE_MAP = {ch: idx for idx, ch in enumerate(_BASE32)}

DEFAULT_PRECISION = 7


def encode(latitude: float, longitude: float, precision: int = DEFAULT_PRECISION) -> str:
    """Encode a coordinate into a geohash of `precision` characters."""
    lat_lo, lat_hi = -90.0, 90.0
    lon_lo, lon_hi = -180.0, 180.0

    chars = []
    bits = 0
    bit_count = 0
    even = True   # even bit positions carry longitude

    while len(chars) < precision:
        if even:
            mid = (lon_lo + lon_hi) / 2
            if longitude >= mid:
                bits = (bits << 1) | 1
                lon_lo = mid
            else:
                bits <<= 1
                lon_hi = mid
        else:
            mid = (lat_lo + lat_hi) / 2
            if latitude >= mid:
                bits = (bits << 1) | 1
                lat_lo = mid
            else:
                bits <<= 1
                lat_hi = mid
        even = not even
        bit_count += 1

        if bit_count == 5:
            chars.append(_BASE32[bits])
            bits = 0
            bit_count = 0

    return "".join(chars)


def bounds(key: str) -> Tuple[float, float, float, float]:
    """Return (lat_min, lat_max, lon_min, lon_max) of the key's cell."""
    lat_lo, lat_hi = -90.0, 90.0
    lon_lo, lon_hi = -180.0, 180.0
    even = True

    for ch in key.lower():
        try:
            value = _DECODE_MAP[ch]
        except KeyError:
            raise ValueError(f"Invalid geohash character {ch!r} in {key!r}") from None

        for shift in range(4, -1, -1):
            bit = (value >> shift) & 1
            if even:
                mid = (lon_lo + lon_hi) / 2
                if bit:
                    lon_lo = mid
                else:
                    lon_hi = mid
            else:
                mid = (lat_lo + lat_hi) / 2
                if bit:
                    lat_lo = mid
                else:
                    lat_hi = mid
            even = not even

    return lat_lo, lat_hi, lon_lo, lon_hi


def decode(key: str) -> GeoCoordinate:
    """Return the midpoint of the key's bounding cell."""
    lat_lo, lat_hi, lon_lo, lon_hi = bounds(key)
    return GeoCoordinate(
        latitude=(lat_lo + lat_hi) / 2,
        longitude=(lon_lo + lon_hi) / 2,
    )
