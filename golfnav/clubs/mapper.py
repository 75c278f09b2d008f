from __future__ import annotations

import math
from typing import Tuple

# (minimum yards, club); lower bound inclusive, ordered longest first.
CLUB_LADDER: Tuple[Tuple[float, str], ...] = (
    (280.0, "Driver"),
    (250.0, "3-Wood"),
    (230.0, "5-Wood"),
    (210.0, "Hybrid"),
    (195.0, "4-Iron"),
    (180.0, "5-Iron"),
    (170.0, "6-Iron"),
    (160.0, "7-Iron"),
    (150.0, "8-Iron"),
    (140.0, "9-Iron"),
    (120.0, "Pitching Wedge"),
    (100.0, "Gap Wedge"),
    (85.0, "Sand Wedge"),
    (70.0, "Lob Wedge"),
)
SHORT_GAME_CLUB = "Short Iron"


def recommend_club(distance_yards: float) -> str:
    """Return the club for a carry of ``distance_yards``."""

    value = float(distance_yards)
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"distance_yards must be a finite, non-negative number: {distance_yards!r}")
    for min_yards, club in CLUB_LADDER:
        if value >= min_yards:
            return club
    return SHORT_GAME_CLUB


__all__ = ["CLUB_LADDER", "SHORT_GAME_CLUB", "recommend_club"]
