from __future__ import annotations

import math
from math import cos, radians, sqrt
from typing import Union

from shapely.geometry import LineString, Point, Polygon

from .models import Coordinate, GeoPolygon, GeoPolyline, InvalidCoordinateError, check_lat_lon
from .projection import EARTH_RADIUS_M, LocalProjection, unique_vertex_count, wrap_longitude_delta

METERS_PER_YARD = 0.9144

Geometry = Union[Coordinate, GeoPolyline, GeoPolygon]

_ORIGIN = Point(0.0, 0.0)


class DistanceComputationError(ValueError):
    """Raised when a distance cannot be computed from the given inputs."""


def _checked(point: object) -> Coordinate:
    if not isinstance(point, Coordinate):
        raise DistanceComputationError(f"expected a Coordinate, got {type(point).__name__}")
    try:
        check_lat_lon(point.latitude, point.longitude)
    except InvalidCoordinateError as exc:
        raise DistanceComputationError(str(exc)) from exc
    return point


def _finite(value: float) -> float:
    if not math.isfinite(value) or value < 0:
        raise DistanceComputationError(f"distance computation produced {value!r}")
    return value


def distance(a: Coordinate, b: Coordinate) -> float:
    """Planar distance between two coordinates in metres.

    Uses an equirectangular projection at the mean latitude of the pair, which
    keeps the result symmetric and within ~1% of the geodesic distance at
    course scale.
    """

    a = _checked(a)
    b = _checked(b)
    mean_lat = radians((a.latitude + b.latitude) / 2.0)
    dx = radians(wrap_longitude_delta(b.longitude - a.longitude)) * cos(mean_lat)
    dy = radians(b.latitude - a.latitude)
    return _finite(EARTH_RADIUS_M * sqrt(dx * dx + dy * dy))


def _polyline_shape(projection: LocalProjection, line: GeoPolyline) -> LineString:
    for point in line.points:
        _checked(point)
    coords = projection.project_many(line.points)
    if unique_vertex_count(coords) < 2:
        raise DistanceComputationError(
            f"polyline needs at least two distinct points, got {len(line.points)}"
        )
    return LineString(coords)


def _polygon_shape(projection: LocalProjection, polygon: GeoPolygon) -> Polygon:
    exterior = polygon.exterior
    for point in exterior:
        _checked(point)
    shell = projection.project_many(exterior)
    if unique_vertex_count(shell) < 3:
        raise DistanceComputationError(
            f"polygon exterior needs at least three distinct points, got {len(exterior)}"
        )
    holes = []
    for ring in polygon.interiors:
        for point in ring:
            _checked(point)
        coords = projection.project_many(ring)
        if unique_vertex_count(coords) >= 3:
            holes.append(coords)
    shape = Polygon(shell, holes)
    if shape.is_empty or shape.area <= 0.0:
        raise DistanceComputationError("polygon has no area")
    return shape


def distance_to_geometry(point: Coordinate, geometry: Geometry) -> float:
    """Distance in metres from ``point`` to a point, line string or polygon.

    A point inside a polygon (or on its edge) is at distance 0.
    """

    point = _checked(point)
    if isinstance(geometry, Coordinate):
        return distance(point, geometry)

    projection = LocalProjection(point)
    if isinstance(geometry, GeoPolyline):
        shape = _polyline_shape(projection, geometry)
    elif isinstance(geometry, GeoPolygon):
        shape = _polygon_shape(projection, geometry)
    else:
        raise DistanceComputationError(
            f"unsupported geometry type: {type(geometry).__name__}"
        )
    return _finite(float(shape.distance(_ORIGIN)))


def contains(polygon: GeoPolygon, point: Coordinate) -> bool:
    """Return True when ``point`` lies inside ``polygon`` or on its boundary."""

    point = _checked(point)
    shape = _polygon_shape(LocalProjection(point), polygon)
    return bool(shape.covers(_ORIGIN))


def meters_to_yards(meters: float) -> float:
    return meters / METERS_PER_YARD


def yards_to_meters(yards: float) -> float:
    return yards * METERS_PER_YARD


__all__ = [
    "DistanceComputationError",
    "Geometry",
    "METERS_PER_YARD",
    "contains",
    "distance",
    "distance_to_geometry",
    "meters_to_yards",
    "yards_to_meters",
]
