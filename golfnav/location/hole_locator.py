from __future__ import annotations

from typing import Optional

from golfnav.courses.schemas import CourseGeometry
from golfnav.geo import Coordinate, distance


def locate_hole(point: Coordinate, course: CourseGeometry) -> Optional[int]:
    """Return the number of the hole whose tee is nearest to ``point``.

    Ties go to the lowest hole number. A course without holes yields ``None``
    rather than a default hole.
    """

    best: Optional[tuple[float, int]] = None
    for hole in course.holes:
        candidate = (distance(point, hole.tee_point), hole.hole_number)
        if best is None or candidate < best:
            best = candidate
    return best[1] if best is not None else None


__all__ = ["locate_hole"]
