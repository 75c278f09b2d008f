from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from golfnav.geo import Coordinate, bearing_deg, compass_label, distance, meters_to_yards

from .mapper import recommend_club


class TargetDistance(BaseModel):
    distance_meters: float = Field(serialization_alias="distanceMeters")
    distance_yards: float = Field(serialization_alias="distanceYards")
    recommended_club: str = Field(serialization_alias="recommendedClub")
    bearing_degrees: float = Field(serialization_alias="bearingDegrees")
    compass: str

    model_config = ConfigDict(frozen=True, populate_by_name=True)


def describe_target(current: Coordinate, target: Coordinate) -> TargetDistance:
    """Distance, club and direction from the player's position to a target."""

    meters = distance(current, target)
    yards = meters_to_yards(meters)
    heading = bearing_deg(current, target)
    return TargetDistance(
        distance_meters=meters,
        distance_yards=yards,
        recommended_club=recommend_club(yards),
        bearing_degrees=heading,
        compass=compass_label(heading),
    )


__all__ = ["TargetDistance", "describe_target"]
