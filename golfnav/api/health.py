"""Liveness report with the state of the geometry cache and round store."""

from __future__ import annotations

import platform
from typing import Any, Dict

from fastapi import Depends

from golfnav import __version__
from golfnav.courses.cache import CourseGeometryCache, get_course_cache
from golfnav.courses.provider import FileCourseGeometryProvider
from golfnav.location.state import RoundStateStore, get_round_state_store
from golfnav.metrics import BUILD_VERSION, GIT_SHA


def health(
    cache: CourseGeometryCache = Depends(get_course_cache),
    states: RoundStateStore = Depends(get_round_state_store),
) -> Dict[str, Any]:
    hits, misses = cache.stats()
    lookups = hits + misses
    return {
        "status": "ok",
        "version": __version__,
        "build": BUILD_VERSION,
        "git": GIT_SHA,
        "python": platform.python_version(),
        "geometry": {
            "source": "files" if isinstance(cache.provider, FileCourseGeometryProvider) else "demo",
            "cache": {
                "hits": hits,
                "misses": misses,
                "hitRatio": round(hits / lookups, 3) if lookups else None,
                "backends": cache.cached_backends(),
            },
        },
        "rounds": {"tracked": states.tracked_rounds, "withState": len(states)},
    }


__all__ = ["health"]
