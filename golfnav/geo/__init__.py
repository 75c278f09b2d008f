"""Coordinate models and course-scale distance helpers."""

from .bearing import bearing_deg, compass_label
from .distance import (
    METERS_PER_YARD,
    DistanceComputationError,
    contains,
    distance,
    distance_to_geometry,
    meters_to_yards,
    yards_to_meters,
)
from .models import Coordinate, GeoPolygon, GeoPolyline, InvalidCoordinateError

__all__ = [
    "Coordinate",
    "DistanceComputationError",
    "GeoPolygon",
    "GeoPolyline",
    "InvalidCoordinateError",
    "METERS_PER_YARD",
    "bearing_deg",
    "compass_label",
    "contains",
    "distance",
    "distance_to_geometry",
    "meters_to_yards",
    "yards_to_meters",
]
