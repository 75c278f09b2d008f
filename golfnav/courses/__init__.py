"""Static course geometry: models, providers, cache and geometry backends."""

from .backends import (
    GeometryBackend,
    PreciseGeometryBackend,
    RadiusGeometryBackend,
    ResolvedRadii,
    resolve_radii,
    select_backend,
)
from .cache import CourseGeometryCache, ResolvedCourse, get_course_cache
from .provider import (
    CourseGeometryError,
    CourseGeometryProvider,
    FileCourseGeometryProvider,
    InMemoryCourseGeometryProvider,
    parse_course_geometry,
)
from .schemas import CourseGeometry, Hazard, HoleGeometry, PositionOnHole, ZoneRadii
from .store import demo_courses, get_course_geometry_provider

__all__ = [
    "CourseGeometry",
    "CourseGeometryCache",
    "CourseGeometryError",
    "CourseGeometryProvider",
    "FileCourseGeometryProvider",
    "GeometryBackend",
    "Hazard",
    "HoleGeometry",
    "InMemoryCourseGeometryProvider",
    "PositionOnHole",
    "PreciseGeometryBackend",
    "RadiusGeometryBackend",
    "ResolvedCourse",
    "ResolvedRadii",
    "ZoneRadii",
    "demo_courses",
    "get_course_cache",
    "get_course_geometry_provider",
    "parse_course_geometry",
    "resolve_radii",
    "select_backend",
]
