"""Telemetry hooks that publish location enrichment outcomes downstream.

Scoring and analytics consumers register a single emitter; when none is
configured the events are dropped with a debug log line.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Mapping, MutableMapping, Optional

LocationTelemetryEmitter = Callable[[str, Mapping[str, object]], None]

_emitter: Optional[LocationTelemetryEmitter] = None
_logger = logging.getLogger("golfnav.telemetry.events")


def set_location_telemetry_emitter(candidate: LocationTelemetryEmitter | None) -> None:
    """Register the emitter used for location and shot events."""

    global _emitter
    _emitter = candidate if callable(candidate) else None


def _safe_emit(event: str, payload: MutableMapping[str, object]) -> None:
    if not _emitter:
        _logger.debug("telemetry emitter not configured for event %s", event)
        return
    try:
        _emitter(event, dict(payload))
    except Exception:  # pragma: no cover
        _logger.exception("failed to emit telemetry event %s", event)


def record_location_enriched(
    *,
    user_id: str,
    round_id: str | None,
    course_id: str | None,
    hole: int | None,
    position: str,
    persisted: bool,
    duration_ms: float,
) -> None:
    payload: Dict[str, object] = {
        "userId": user_id,
        "position": position,
        "persisted": persisted,
        "durationMs": int(max(0, round(duration_ms))),
        "ts": _now_ms(),
    }
    if round_id:
        payload["roundId"] = round_id
    if course_id:
        payload["courseId"] = course_id
    if hole is not None:
        payload["hole"] = int(hole)
    _safe_emit("location.enriched", payload)


def record_shot_event(shot: Mapping[str, object]) -> None:
    payload: Dict[str, object] = dict(shot)
    payload["ts"] = _now_ms()
    _safe_emit("location.shot", payload)


def record_geometry_gap(*, course_id: str | None, kind: str, user_id: str) -> None:
    payload: Dict[str, object] = {"kind": kind, "userId": user_id, "ts": _now_ms()}
    if course_id:
        payload["courseId"] = course_id
    _safe_emit("location.geometry_gap", payload)


def _now_ms() -> int:
    from time import time

    return int(time() * 1000)


__all__ = [
    "set_location_telemetry_emitter",
    "record_location_enriched",
    "record_shot_event",
    "record_geometry_gap",
]
