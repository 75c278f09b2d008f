"""Geometry strategies used by zone classification and boundary checks.

Courses arrive with very different levels of digitization. Rather than keep
two code paths, every course is paired with one backend:

* ``PreciseGeometryBackend`` uses polygons and line strings where present.
* ``RadiusGeometryBackend`` only uses radii around known points.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from golfnav.geo import Coordinate, contains, distance, distance_to_geometry

from .schemas import CourseGeometry, HoleGeometry, PositionOnHole


@dataclass(frozen=True, slots=True)
class ResolvedRadii:
    tee_radius_m: float
    green_radius_m: float
    fairway_half_width_m: float
    hazard_radius_m: float


def resolve_radii(settings, course: CourseGeometry | None = None) -> ResolvedRadii:
    """Merge configured radii with a course's own overrides."""

    override = course.zone_radii if course is not None else None

    def pick(name: str) -> float:
        value = getattr(override, name, None) if override is not None else None
        return float(value if value is not None else getattr(settings, name))

    return ResolvedRadii(
        tee_radius_m=pick("tee_radius_m"),
        green_radius_m=pick("green_radius_m"),
        fairway_half_width_m=pick("fairway_half_width_m"),
        hazard_radius_m=pick("hazard_radius_m"),
    )


class GeometryBackend(Protocol):
    name: str

    def within_course(
        self, point: Coordinate, course: CourseGeometry, *, fallback_radius_m: float
    ) -> bool:
        ...

    def refine_zone(
        self, point: Coordinate, hole: HoleGeometry, radii: ResolvedRadii
    ) -> Optional[PositionOnHole]:
        ...


def _within_center_radius(
    point: Coordinate, course: CourseGeometry, radius_m: float
) -> bool:
    return distance(point, course.center_point) <= radius_m


def _in_hazard(point: Coordinate, hole: HoleGeometry, radius_m: float, *, polygons: bool) -> bool:
    for hazard in hole.hazards:
        if polygons and hazard.polygon is not None:
            if contains(hazard.polygon, point):
                return True
        elif hazard.center is not None:
            if distance(point, hazard.center) <= radius_m:
                return True
    return False


class RadiusGeometryBackend:
    name = "radius"

    def within_course(
        self, point: Coordinate, course: CourseGeometry, *, fallback_radius_m: float
    ) -> bool:
        return _within_center_radius(point, course, fallback_radius_m)

    def refine_zone(
        self, point: Coordinate, hole: HoleGeometry, radii: ResolvedRadii
    ) -> Optional[PositionOnHole]:
        if _in_hazard(point, hole, radii.hazard_radius_m, polygons=False):
            return PositionOnHole.HAZARD
        return None


class PreciseGeometryBackend:
    name = "precise"

    def within_course(
        self, point: Coordinate, course: CourseGeometry, *, fallback_radius_m: float
    ) -> bool:
        if course.boundary_polygon is None:
            return _within_center_radius(point, course, fallback_radius_m)
        return contains(course.boundary_polygon, point)

    def refine_zone(
        self, point: Coordinate, hole: HoleGeometry, radii: ResolvedRadii
    ) -> Optional[PositionOnHole]:
        if hole.fairway_centerline is not None:
            offset = distance_to_geometry(point, hole.fairway_centerline)
            if offset <= radii.fairway_half_width_m:
                return PositionOnHole.FAIRWAY
        if _in_hazard(point, hole, radii.hazard_radius_m, polygons=True):
            return PositionOnHole.HAZARD
        if hole.hole_boundary is not None and not contains(hole.hole_boundary, point):
            return PositionOnHole.ROUGH
        return None


PRECISE_BACKEND = PreciseGeometryBackend()
RADIUS_BACKEND = RadiusGeometryBackend()


def select_backend(course: CourseGeometry) -> GeometryBackend:
    """Pick the richest backend the course's digitized data supports."""

    if course.boundary_polygon is not None:
        return PRECISE_BACKEND
    if any(hole.has_precise_geometry for hole in course.holes):
        return PRECISE_BACKEND
    return RADIUS_BACKEND


__all__ = [
    "GeometryBackend",
    "PRECISE_BACKEND",
    "PreciseGeometryBackend",
    "RADIUS_BACKEND",
    "RadiusGeometryBackend",
    "ResolvedRadii",
    "resolve_radii",
    "select_backend",
]
