"""
AEDCheck Backend — Geographic Helpers
======================================

What:  Great-circle distance and coordinate coercion.
Why:   "AEDs near me" sorts scoped equipment by distance from the caller.
How:   Haversine formula on a spherical earth (R = 6371 km). Coordinates are
       converted to float once, where rows leave the data-access layer, so
       Decimal values from NUMERIC columns never reach the math.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

EARTH_RADIUS_KM = 6371.0


def to_float(value: Any) -> Optional[float]:
    """Decimal, int, float or numeric string → float; anything else → None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, (int, Decimal)):
        try:
            result = float(value)
        except (InvalidOperation, OverflowError, ValueError):
            return None
        return result if math.isfinite(result) else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            result = float(text)
        except ValueError:
            return None
        return result if math.isfinite(result) else None
    return None


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometres between two (lat, lon) points given in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def is_valid_coordinate(lat: Optional[float], lon: Optional[float]) -> bool:
    if lat is None or lon is None:
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0
