import json

import pytest

from golfnav.config import get_settings
from golfnav.courses.backends import (
    PRECISE_BACKEND,
    RADIUS_BACKEND,
    resolve_radii,
    select_backend,
)
from golfnav.courses.cache import CourseGeometryCache
from golfnav.courses.provider import (
    CourseGeometryError,
    FileCourseGeometryProvider,
    InMemoryCourseGeometryProvider,
    parse_course_geometry,
)
from golfnav.courses.schemas import CourseGeometry, HoleGeometry, ZoneRadii
from golfnav.courses.store import demo_courses
from golfnav.geo import contains

from .factories import ORIGIN, precise_course, radius_course


class CountingProvider(InMemoryCourseGeometryProvider):
    def __init__(self, courses) -> None:
        super().__init__(courses)
        self.loads = 0

    def get_course_geometry(self, course_id):
        self.loads += 1
        return super().get_course_geometry(course_id)


def _dump(course: CourseGeometry) -> str:
    return json.dumps(course.model_dump(mode="json", by_alias=True))


def test_hole_must_belong_to_course() -> None:
    hole = HoleGeometry(course_id="other", hole_number=1, tee_point=ORIGIN, pin_point=ORIGIN)
    with pytest.raises(ValueError):
        CourseGeometry(course_id="mine", center_point=ORIGIN, holes=[hole])


def test_hole_numbers_are_unique() -> None:
    holes = [
        HoleGeometry(course_id="c", hole_number=1, tee_point=ORIGIN, pin_point=ORIGIN),
        HoleGeometry(course_id="c", hole_number=1, tee_point=ORIGIN, pin_point=ORIGIN),
    ]
    with pytest.raises(ValueError):
        CourseGeometry(course_id="c", center_point=ORIGIN, holes=holes)


def test_parse_fills_in_hole_course_id() -> None:
    payload = {
        "courseId": "lakeside",
        "centerPoint": {"latitude": 1.0, "longitude": 2.0},
        "holes": [
            {
                "holeNumber": 1,
                "teePoint": {"latitude": 1.0, "longitude": 2.0},
                "pinPoint": {"latitude": 1.001, "longitude": 2.0},
            }
        ],
    }
    course = parse_course_geometry(payload, source="test")
    assert course.holes[0].course_id == "lakeside"


def test_parse_rejects_invalid_document() -> None:
    with pytest.raises(CourseGeometryError):
        parse_course_geometry({"courseId": "x"}, source="test")
    with pytest.raises(CourseGeometryError):
        parse_course_geometry([], source="test")  # type: ignore[arg-type]


def test_backend_selection() -> None:
    assert select_backend(precise_course()) is PRECISE_BACKEND
    assert select_backend(radius_course()) is RADIUS_BACKEND
    for course in demo_courses():
        expected = PRECISE_BACKEND if course.course_id == "demo-links" else RADIUS_BACKEND
        assert select_backend(course) is expected


def test_resolve_radii_prefers_course_override() -> None:
    settings = get_settings()
    course = radius_course().model_copy(
        update={"zone_radii": ZoneRadii(green_radius_m=25.0)}
    )
    radii = resolve_radii(settings, course)
    assert radii.green_radius_m == 25.0
    assert radii.tee_radius_m == settings.tee_radius_m
    assert resolve_radii(settings).fairway_half_width_m == settings.fairway_half_width_m


def test_file_provider_round_trip(tmp_path) -> None:
    (tmp_path / "test-links.json").write_text(_dump(precise_course()), encoding="utf-8")
    provider = FileCourseGeometryProvider(tmp_path)
    assert provider.list_course_ids() == ["test-links"]
    loaded = provider.get_course_geometry("test-links")
    assert loaded == precise_course()
    assert provider.get_course_geometry("missing") is None
    assert provider.get_course_geometry("../etc/passwd") is None


def test_file_provider_reports_corrupt_json(tmp_path) -> None:
    (tmp_path / "bad.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(CourseGeometryError):
        FileCourseGeometryProvider(tmp_path).get_course_geometry("bad")


def test_file_provider_rejects_course_id_that_differs_from_file_name(tmp_path) -> None:
    (tmp_path / "other.json").write_text(_dump(precise_course()), encoding="utf-8")
    cache = CourseGeometryCache(FileCourseGeometryProvider(tmp_path))
    with pytest.raises(CourseGeometryError, match="does not match file name"):
        cache.get("other")
    assert cache.stats() == (0, 1)


def test_cache_hits_after_first_load() -> None:
    provider = CountingProvider([precise_course()])
    cache = CourseGeometryCache(provider, cap=4, ttl_seconds=60)
    first = cache.get("test-links")
    second = cache.get("test-links")
    assert first is second
    assert provider.loads == 1
    assert cache.stats() == (1, 1)
    assert first.backend is PRECISE_BACKEND


def test_cache_does_not_remember_missing_courses() -> None:
    provider = CountingProvider([])
    cache = CourseGeometryCache(provider)
    assert cache.get("later") is None
    provider.put(radius_course("later"))
    assert cache.get("later") is not None


def test_cache_ttl_expiry(monkeypatch) -> None:
    now = {"t": 1000.0}
    monkeypatch.setattr("golfnav.courses.cache.time", lambda: now["t"])
    provider = CountingProvider([precise_course()])
    cache = CourseGeometryCache(provider, ttl_seconds=30)
    cache.get("test-links")
    now["t"] += 29
    cache.get("test-links")
    assert provider.loads == 1
    now["t"] += 2
    cache.get("test-links")
    assert provider.loads == 2


def test_cache_lru_eviction() -> None:
    provider = CountingProvider([radius_course("a"), radius_course("b"), radius_course("c")])
    cache = CourseGeometryCache(provider, cap=2)
    cache.get("a")
    cache.get("b")
    cache.get("a")
    cache.get("c")  # evicts b
    loads = provider.loads
    cache.get("a")
    assert provider.loads == loads
    cache.get("b")
    assert provider.loads == loads + 1


def test_invalidate_forces_reload() -> None:
    provider = CountingProvider([precise_course()])
    cache = CourseGeometryCache(provider)
    cache.get("test-links")
    assert cache.invalidate("test-links") is True
    assert cache.invalidate("test-links") is False
    cache.get("test-links")
    assert provider.loads == 2


def test_changed_file_is_reloaded(tmp_path) -> None:
    path = tmp_path / "test-parkland.json"
    path.write_text(_dump(radius_course()), encoding="utf-8")
    cache = CourseGeometryCache(FileCourseGeometryProvider(tmp_path))
    assert cache.get("test-parkland").geometry.name == "Test Parkland"

    renamed = radius_course().model_copy(update={"name": "Test Parkland Renovated"})
    path.write_text(_dump(renamed), encoding="utf-8")
    assert cache.get("test-parkland").geometry.name == "Test Parkland Renovated"


def test_demo_courses_are_consistent() -> None:
    for course in demo_courses():
        assert course.holes
        for hole in course.holes:
            assert hole.course_id == course.course_id
    links = next(c for c in demo_courses() if c.course_id == "demo-links")
    for hole in links.holes:
        assert contains(links.boundary_polygon, hole.tee_point)
        assert contains(links.boundary_polygon, hole.pin_point)
