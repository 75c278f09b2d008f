"""Shared pytest fixtures for golfnav tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from golfnav.app import app
from golfnav.config import get_settings, reset_settings_cache
from golfnav.courses.cache import CourseGeometryCache, get_course_cache
from golfnav.courses.provider import InMemoryCourseGeometryProvider
from golfnav.location.repository import LocationRepository, get_location_repository
from golfnav.location.service import LocationStateUpdater, get_location_service
from golfnav.location.state import RoundStateStore, get_round_state_store
from golfnav.telemetry.events import set_location_telemetry_emitter

from .factories import precise_course, radius_course


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("REQUIRE_API_KEY", raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()
    set_location_telemetry_emitter(None)


@pytest.fixture
def provider() -> InMemoryCourseGeometryProvider:
    return InMemoryCourseGeometryProvider([precise_course(), radius_course()])


@pytest.fixture
def course_cache(provider) -> CourseGeometryCache:
    return CourseGeometryCache(provider, cap=8, ttl_seconds=60)


@pytest.fixture
def repository(tmp_path) -> LocationRepository:
    return LocationRepository(tmp_path / "locations")


@pytest.fixture
def state_store() -> RoundStateStore:
    return RoundStateStore()


@pytest.fixture
def updater(course_cache, state_store, repository) -> LocationStateUpdater:
    return LocationStateUpdater(
        course_cache, state_store, repository, get_settings(), sleep=lambda _s: None
    )


@pytest.fixture
def telemetry_events():
    events: list[tuple[str, dict]] = []
    set_location_telemetry_emitter(lambda name, payload: events.append((name, dict(payload))))
    return events


@pytest.fixture
def api_client(updater, course_cache, repository, state_store):
    app.dependency_overrides[get_location_service] = lambda: updater
    app.dependency_overrides[get_round_state_store] = lambda: state_store
    app.dependency_overrides[get_course_cache] = lambda: course_cache
    app.dependency_overrides[get_location_repository] = lambda: repository
    client = TestClient(app)
    yield client
    app.dependency_overrides.pop(get_location_service, None)
    app.dependency_overrides.pop(get_course_cache, None)
    app.dependency_overrides.pop(get_location_repository, None)
    app.dependency_overrides.pop(get_round_state_store, None)
