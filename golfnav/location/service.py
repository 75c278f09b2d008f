"""Turns raw location fixes into enriched, persisted golf context."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from functools import lru_cache
from typing import Callable, Optional, Tuple, TypeVar

from golfnav.config import get_settings
from golfnav.courses.backends import resolve_radii
from golfnav.courses.cache import CourseGeometryCache, ResolvedCourse, get_course_cache
from golfnav.courses.provider import CourseGeometryError
from golfnav.courses.schemas import PositionOnHole
from golfnav.geo import DistanceComputationError, distance
from golfnav.metrics import (
    ENRICH_LATENCY,
    FIXES_ENRICHED,
    FIXES_REJECTED,
    GEOMETRY_GAPS,
    PERSISTENCE_FAILURES,
    SHOT_EVENTS,
)
from golfnav.telemetry.events import (
    record_geometry_gap,
    record_location_enriched,
    record_shot_event,
)

from .boundary import is_within_course
from .classifier import classify
from .hole_locator import locate_hole
from .models import EnrichedLocation, EnrichmentResult, LocationFix, RoundKey, ShotEvent
from .repository import (
    LocationPersistenceError,
    LocationRepository,
    get_location_repository,
)
from .shots import ShotSequencer
from .state import RoundState, RoundStateStore, get_round_state_store

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OutOfOrderFixError(Exception):
    """A fix older than the last accepted fix of its round."""

    def __init__(self, key: RoundKey, timestamp: datetime, last_timestamp: datetime):
        self.key = key
        self.timestamp = timestamp
        self.last_timestamp = last_timestamp
        super().__init__(
            f"fix at {timestamp.isoformat()} is older than last accepted fix "
            f"at {last_timestamp.isoformat()}"
        )


class LocationStateUpdater:
    def __init__(
        self,
        courses: CourseGeometryCache,
        states: RoundStateStore,
        repository: LocationRepository,
        settings=None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._courses = courses
        self._states = states
        self._repository = repository
        self._settings = settings or get_settings()
        self._sequencer = ShotSequencer(self._settings.min_shot_distance_m)
        self._sleep = sleep

    @property
    def repository(self) -> LocationRepository:
        return self._repository

    def enrich(self, fix: LocationFix) -> EnrichmentResult:
        start = time.perf_counter()
        key = fix.round_key
        with self._states.lock(key):
            state = self._states.get(key)
            if state is None:
                state = self._hydrate(fix)
                self._states.put(key, state)

            last_ts = state.last_timestamp
            if last_ts is not None and fix.timestamp < last_ts:
                FIXES_REJECTED.labels(reason="out_of_order").inc()
                logger.info(
                    "rejected out-of-order fix",
                    extra={"user_id": fix.user_id, "round_id": fix.round_id},
                )
                raise OutOfOrderFixError(key, fix.timestamp, last_ts)
            previous = state.last_record
            if last_ts is not None and fix.timestamp == last_ts and previous is not None:
                return self._replay_duplicate(state, previous)

            working = state.copy()
            record, shot = self._compute(fix, working)
            working.last_timestamp = fix.timestamp
            working.last_record = record
            self._states.put(key, working)

            if shot is not None:
                self._write_with_retry(
                    lambda: self._repository.append_shot(shot), what="shot", fix=fix
                )
            stored = self._write_with_retry(
                lambda: self._repository.append_location(record),
                what="location",
                fix=fix,
            )
            if stored is not None:
                record = stored
                working.last_record = stored

        duration = time.perf_counter() - start
        ENRICH_LATENCY.observe(duration)
        FIXES_ENRICHED.labels(
            position=record.position_on_hole.value,
            persisted=str(record.persisted).lower(),
        ).inc()
        record_location_enriched(
            user_id=record.user_id,
            round_id=record.round_id,
            course_id=record.course_id,
            hole=record.current_hole,
            position=record.position_on_hole.value,
            persisted=record.persisted,
            duration_ms=duration * 1000.0,
        )
        if shot is not None:
            SHOT_EVENTS.inc()
            record_shot_event(shot.to_dict())
            logger.debug(
                "shot detected",
                extra={
                    "user_id": shot.user_id,
                    "round_id": shot.round_id,
                    "distance_m": round(shot.distance_meters, 1),
                },
            )
        return EnrichmentResult(location=record, shot_event=shot)

    def _replay_duplicate(
        self, state: RoundState, record: EnrichedLocation
    ) -> EnrichmentResult:
        FIXES_REJECTED.labels(reason="duplicate").inc()
        if not record.persisted:
            stored = self._write_with_retry(
                lambda: self._repository.append_location(record),
                what="location",
                fix=record,
            )
            if stored is not None:
                record = stored
                state.last_record = stored
        return EnrichmentResult(location=record, duplicate=True)

    def _compute(
        self, fix: LocationFix, working: RoundState
    ) -> Tuple[EnrichedLocation, Optional[ShotEvent]]:
        point = fix.coordinate
        resolved = self._resolve_course(fix)

        current_hole: Optional[int] = None
        position = PositionOnHole.UNKNOWN
        to_tee: Optional[float] = None
        to_pin: Optional[float] = None
        within = False

        if resolved is not None:
            course, backend = resolved.geometry, resolved.backend
            current_hole = locate_hole(point, course)
            hole = course.hole(current_hole) if current_hole is not None else None
            radii = resolve_radii(self._settings, course)
            position = self._guarded(
                "positionOnHole",
                fix,
                lambda: classify(point, hole, radii, backend),
                PositionOnHole.UNKNOWN,
            )
            within = self._guarded(
                "withinCourseBoundary",
                fix,
                lambda: is_within_course(
                    point,
                    course,
                    backend,
                    fallback_radius_m=self._settings.course_radius_m,
                ),
                False,
            )
            if hole is not None:
                to_tee = self._guarded(
                    "distanceToTeeMeters", fix, lambda: distance(point, hole.tee_point), None
                )
                to_pin = self._guarded(
                    "distanceToPinMeters", fix, lambda: distance(point, hole.pin_point), None
                )
            else:
                self._geometry_gap(fix, "no_holes")

        shot = self._sequencer.on_new_fix(working, fix, current_hole)
        last_shot = working.last_shot

        record = EnrichedLocation(
            **fix.model_dump(),
            current_hole=current_hole,
            position_on_hole=position,
            distance_to_tee_meters=to_tee,
            distance_to_pin_meters=to_pin,
            within_course_boundary=within,
            last_shot_distance_meters=last_shot.distance_meters if last_shot else None,
            last_shot_location=last_shot.from_location if last_shot else None,
        )
        return record, shot

    def _resolve_course(self, fix: LocationFix) -> Optional[ResolvedCourse]:
        if not fix.course_id:
            self._geometry_gap(fix, "no_course_id")
            return None
        try:
            resolved = self._courses.get(fix.course_id)
        except CourseGeometryError:
            logger.exception(
                "course geometry could not be loaded",
                extra={"course_id": fix.course_id},
            )
            self._geometry_gap(fix, "invalid_course")
            return None
        if resolved is None:
            self._geometry_gap(fix, "unknown_course")
        return resolved

    def _geometry_gap(self, fix: LocationFix, kind: str) -> None:
        GEOMETRY_GAPS.labels(kind=kind).inc()
        logger.warning(
            "no usable course geometry for fix",
            extra={
                "kind": kind,
                "course_id": fix.course_id,
                "user_id": fix.user_id,
                "round_id": fix.round_id,
            },
        )
        record_geometry_gap(course_id=fix.course_id, kind=kind, user_id=fix.user_id)

    def _guarded(
        self, field: str, fix: LocationFix, compute: Callable[[], T], fallback: T
    ) -> T:
        try:
            return compute()
        except DistanceComputationError as exc:
            logger.warning(
                "degenerate geometry, leaving %s unset: %s",
                field,
                exc,
                extra={"course_id": fix.course_id, "field": field},
            )
            GEOMETRY_GAPS.labels(kind="degenerate").inc()
            return fallback

    def _write_with_retry(
        self, write: Callable[[], T], *, what: str, fix: LocationFix
    ) -> Optional[T]:
        attempts = max(1, int(self._settings.persist_retries))
        for attempt in range(1, attempts + 1):
            try:
                return write()
            except LocationPersistenceError:
                if attempt >= attempts:
                    PERSISTENCE_FAILURES.inc()
                    logger.exception(
                        "failed to persist %s after %d attempts",
                        what,
                        attempts,
                        extra={"user_id": fix.user_id, "round_id": fix.round_id},
                    )
                    return None
                self._sleep(self._settings.persist_backoff_s * attempt)
        return None

    def _hydrate(self, fix: LocationFix) -> RoundState:
        """Rebuild round state from stored history."""

        state = RoundState()
        try:
            history = self._repository.list_locations(fix.user_id, fix.round_id)
            shots = (
                self._repository.list_shots(fix.user_id, fix.round_id)
                if fix.round_id
                else []
            )
        except LocationPersistenceError:
            logger.exception(
                "could not read round history, starting from empty state",
                extra={"user_id": fix.user_id, "round_id": fix.round_id},
            )
            return state
        if not history:
            return state

        last = history[-1]
        state.last_timestamp = last.timestamp
        state.last_record = last
        if fix.round_id:
            if shots:
                state.last_shot = shots[-1]
                state.anchor = shots[-1].to_location
            else:
                state.anchor = history[0].coordinate
        logger.debug(
            "hydrated round state",
            extra={
                "user_id": fix.user_id,
                "round_id": fix.round_id,
                "fixes": len(history),
                "shots": len(shots),
            },
        )
        return state


@lru_cache(maxsize=1)
def get_location_service() -> LocationStateUpdater:
    return LocationStateUpdater(
        get_course_cache(),
        get_round_state_store(),
        get_location_repository(),
        get_settings(),
    )


__all__ = ["LocationStateUpdater", "OutOfOrderFixError", "get_location_service"]
