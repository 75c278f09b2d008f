from __future__ import annotations

from typing import Optional

from golfnav.geo import distance

from .models import LocationFix, ShotEvent
from .state import RoundState


class ShotSequencer:
    """Detects shots as displacements of the player from a single anchor.

    The first fix of a round becomes the anchor. Later fixes emit a
    :class:`ShotEvent` only once they are more than ``min_shot_distance_m``
    away from it, after which the anchor moves to that fix. GPS jitter around
    a stationary player therefore never produces shots.
    """

    def __init__(self, min_shot_distance_m: float) -> None:
        if min_shot_distance_m <= 0:
            raise ValueError("min_shot_distance_m must be positive")
        self.min_shot_distance_m = float(min_shot_distance_m)

    def on_new_fix(
        self, state: RoundState, fix: LocationFix, hole: Optional[int]
    ) -> Optional[ShotEvent]:
        # Updates ``state`` in place; callers pass a working copy.
        if fix.round_id is None:
            return None
        if state.anchor is None:
            state.anchor = fix.coordinate
            return None

        moved = distance(state.anchor, fix.coordinate)
        if moved <= self.min_shot_distance_m:
            return None

        event = ShotEvent(
            user_id=fix.user_id,
            round_id=fix.round_id,
            hole_number=hole,
            from_location=state.anchor,
            to_location=fix.coordinate,
            distance_meters=moved,
            timestamp=fix.timestamp,
        )
        state.anchor = fix.coordinate
        state.last_shot = event
        return event


__all__ = ["ShotSequencer"]
