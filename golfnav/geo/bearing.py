from __future__ import annotations

from math import atan2, cos, pi, radians, sin

from .distance import _checked
from .models import Coordinate

COMPASS_POINTS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")


def bearing_deg(start: Coordinate, end: Coordinate) -> float:
    """Initial great-circle course from ``start`` to ``end`` in [0, 360)."""

    start = _checked(start)
    end = _checked(end)
    lat1 = radians(start.latitude)
    lat2 = radians(end.latitude)
    dlon = radians(end.longitude - start.longitude)

    x = sin(dlon) * cos(lat2)
    y = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(dlon)
    bearing = (atan2(x, y) + 2 * pi) % (2 * pi) * 180 / pi
    # fmod rounding can land exactly on 360.0
    return 0.0 if bearing >= 360.0 else bearing


def compass_label(degrees: float) -> str:
    """Map a bearing to one of the eight principal compass points."""

    index = int(round((degrees % 360.0) / 45.0)) % len(COMPASS_POINTS)
    return COMPASS_POINTS[index]


__all__ = ["COMPASS_POINTS", "bearing_deg", "compass_label"]
