from __future__ import annotations

from golfnav.courses.backends import GeometryBackend
from golfnav.courses.schemas import CourseGeometry
from golfnav.geo import Coordinate, distance


def is_within_course(
    point: Coordinate,
    course: CourseGeometry,
    backend: GeometryBackend,
    fallback_radius_m: float,
) -> bool:
    """Whether ``point`` lies on the course.

    Courses with a boundary polygon use point-in-polygon; otherwise the fix
    must be within ``fallback_radius_m`` of the course centre. The centre
    itself is always inside.
    """

    if distance(point, course.center_point) == 0.0:
        return True
    return backend.within_course(point, course, fallback_radius_m=fallback_radius_m)


__all__ = ["is_within_course"]
