"""Local planar projection used for course-scale geometry.

Course features are always within a few kilometres of each other, so an
equirectangular projection around a local origin stays within ~1% of the
geodesic distance while letting us do plain Euclidean geometry.
"""

from __future__ import annotations

from math import cos, radians
from typing import Iterable, Sequence

import numpy as np
from numpy.typing import NDArray

from .models import Coordinate

EARTH_RADIUS_M = 6_371_000.0

MetricArray = NDArray[np.float64]


def wrap_longitude_delta(delta_deg: float) -> float:
    """Wrap a longitude difference into [-180, 180) degrees."""

    return (delta_deg + 180.0) % 360.0 - 180.0


class LocalProjection:
    """Equirectangular projection centred on ``origin``.

    ``x`` grows eastwards and ``y`` northwards, both in metres.
    """

    __slots__ = ("origin", "_cos_lat")

    def __init__(self, origin: Coordinate) -> None:
        self.origin = origin
        self._cos_lat = cos(radians(origin.latitude))

    def project(self, point: Coordinate) -> tuple[float, float]:
        dlon = wrap_longitude_delta(point.longitude - self.origin.longitude)
        dlat = point.latitude - self.origin.latitude
        x = EARTH_RADIUS_M * radians(dlon) * self._cos_lat
        y = EARTH_RADIUS_M * radians(dlat)
        return x, y

    def project_many(self, points: Iterable[Coordinate]) -> MetricArray:
        coords = [(p.latitude, p.longitude) for p in points]
        if not coords:
            return np.empty((0, 2), dtype=np.float64)
        latlon = np.asarray(coords, dtype=np.float64)
        dlon = (latlon[:, 1] - self.origin.longitude + 180.0) % 360.0 - 180.0
        dlat = latlon[:, 0] - self.origin.latitude
        x = EARTH_RADIUS_M * np.radians(dlon) * self._cos_lat
        y = EARTH_RADIUS_M * np.radians(dlat)
        return np.column_stack((x, y))


def unique_vertex_count(points: Sequence[Sequence[float]] | MetricArray) -> int:
    array = np.asarray(points, dtype=np.float64)
    if array.size == 0:
        return 0
    return int(len(np.unique(np.round(array, 6), axis=0)))


__all__ = [
    "EARTH_RADIUS_M",
    "LocalProjection",
    "MetricArray",
    "unique_vertex_count",
    "wrap_longitude_delta",
]
