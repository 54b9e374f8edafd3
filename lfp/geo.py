"""Geospatial helpers."""
from __future__ import annotations

import math
from typing import Any, Mapping, Optional, Tuple

from . import config


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    r = 6371.0
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # rounding can push near-antipodal pairs just past 1.0; NaN passes through
    if not math.isnan(a):
        a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return r * c


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a coordinate
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def record_coords(record: Mapping[str, Any]) -> Optional[Tuple[float, float]]:
    lat = record.get(config.LAT_FIELD)
    lon = record.get(config.LON_FIELD)
    if not is_number(lat) or not is_number(lon):
        return None
    return float(lat), float(lon)


def distance_to_record(center: Any, record: Mapping[str, Any]) -> Optional[float]:
    """Distance in km from a center (anything with lat/lon) to a record, if it has coordinates."""
    coords = record_coords(record)
    if coords is None:
        return None
    return haversine_km(center.lat, center.lon, coords[0], coords[1])
