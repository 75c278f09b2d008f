"""Club recommendations and target distances for the presentation layer."""

from .mapper import CLUB_LADDER, SHORT_GAME_CLUB, recommend_club
from .targets import TargetDistance, describe_target

__all__ = [
    "CLUB_LADDER",
    "SHORT_GAME_CLUB",
    "TargetDistance",
    "describe_target",
    "recommend_club",
]
