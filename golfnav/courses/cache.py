from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from functools import lru_cache
from threading import Lock
from time import time
from typing import Dict, Optional

from golfnav.config import get_settings
from golfnav.metrics import COURSE_CACHE_EVENTS

from .backends import GeometryBackend, select_backend
from .provider import CourseGeometryProvider
from .schemas import CourseGeometry
from .store import get_course_geometry_provider

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolvedCourse:
    """A loaded course paired with the geometry backend chosen for it."""

    geometry: CourseGeometry
    backend: GeometryBackend


@dataclass(slots=True)
class _CacheEntry:
    course: ResolvedCourse
    fingerprint: Optional[str]
    expires_at: float


class CourseGeometryCache:
    """Read-through cache of course geometry keyed by course id.

    Entries expire after ``ttl_seconds``, the least recently used entry is
    evicted beyond ``cap``, and providers exposing ``fingerprint(course_id)``
    get their entries refreshed as soon as the stored data changes.
    Missing courses are never cached.
    """

    def __init__(
        self,
        provider: CourseGeometryProvider,
        *,
        cap: int = 128,
        ttl_seconds: float = 3600.0,
    ) -> None:
        self._provider = provider
        self._cap = max(1, int(cap))
        self._ttl = max(1.0, float(ttl_seconds))
        self._store: "OrderedDict[str, _CacheEntry]" = OrderedDict()
        self._lock = Lock()
        self.hit_count = 0
        self.miss_count = 0

    @property
    def provider(self) -> CourseGeometryProvider:
        return self._provider

    def _fingerprint(self, course_id: str) -> Optional[str]:
        fingerprint = getattr(self._provider, "fingerprint", None)
        if fingerprint is None:
            return None
        return fingerprint(course_id)

    def get(self, course_id: str) -> Optional[ResolvedCourse]:
        fingerprint = self._fingerprint(course_id)
        with self._lock:
            entry = self._store.get(course_id)
            if entry is not None:
                stale = entry.expires_at < time() or entry.fingerprint != fingerprint
                if not stale:
                    self._store.move_to_end(course_id)
                    self.hit_count += 1
                    COURSE_CACHE_EVENTS.labels(result="hit").inc()
                    return entry.course
                self._store.pop(course_id, None)
            self.miss_count += 1
        COURSE_CACHE_EVENTS.labels(result="miss").inc()

        geometry = self._provider.get_course_geometry(course_id)
        if geometry is None:
            return None
        resolved = ResolvedCourse(geometry=geometry, backend=select_backend(geometry))
        logger.debug(
            "loaded course geometry %s (%s backend, %d holes)",
            course_id,
            resolved.backend.name,
            len(geometry.holes),
        )
        with self._lock:
            self._store[course_id] = _CacheEntry(
                course=resolved,
                fingerprint=fingerprint,
                expires_at=time() + self._ttl,
            )
            self._store.move_to_end(course_id)
            while len(self._store) > self._cap:
                self._store.popitem(last=False)
        return resolved

    def invalidate(self, course_id: str) -> bool:
        with self._lock:
            removed = self._store.pop(course_id, None) is not None
        if removed:
            logger.info("invalidated cached geometry", extra={"course_id": course_id})
        return removed

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self.hit_count = 0
            self.miss_count = 0

    def stats(self) -> tuple[int, int]:
        with self._lock:
            return self.hit_count, self.miss_count

    def cached_backends(self) -> Dict[str, str]:
        """Backend name per currently cached course id."""

        with self._lock:
            return {cid: entry.course.backend.name for cid, entry in self._store.items()}


@lru_cache(maxsize=1)
def get_course_cache() -> CourseGeometryCache:
    settings = get_settings()
    return CourseGeometryCache(
        get_course_geometry_provider(),
        cap=settings.course_cache_size,
        ttl_seconds=settings.course_cache_ttl_s,
    )


__all__ = ["CourseGeometryCache", "ResolvedCourse", "get_course_cache"]
