"""Read-side summaries over stored round history."""

from __future__ import annotations

from datetime import datetime
from statistics import fmean
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from golfnav.courses.schemas import PositionOnHole

from .models import EnrichedLocation, ShotEvent
from .repository import LocationRepository


class PositionSummary(BaseModel):
    position: PositionOnHole
    count: int
    average_distance_to_pin_meters: Optional[float] = Field(
        default=None, serialization_alias="averageDistanceToPinMeters"
    )
    min_distance_to_pin_meters: Optional[float] = Field(
        default=None, serialization_alias="minDistanceToPinMeters"
    )
    max_distance_to_pin_meters: Optional[float] = Field(
        default=None, serialization_alias="maxDistanceToPinMeters"
    )

    model_config = ConfigDict(populate_by_name=True)


class HolePositionDistribution(BaseModel):
    course_id: str = Field(serialization_alias="courseId")
    hole_number: int = Field(serialization_alias="holeNumber")
    total: int
    positions: List[PositionSummary]

    model_config = ConfigDict(populate_by_name=True)


class LocationStatistics(BaseModel):
    user_id: str = Field(serialization_alias="userId")
    round_id: str = Field(serialization_alias="roundId")
    fix_count: int = Field(serialization_alias="fixCount")
    first_fix_at: Optional[datetime] = Field(default=None, serialization_alias="firstFixAt")
    last_fix_at: Optional[datetime] = Field(default=None, serialization_alias="lastFixAt")
    elapsed_seconds: float = Field(default=0.0, serialization_alias="elapsedSeconds")
    average_accuracy_meters: Optional[float] = Field(
        default=None, serialization_alias="averageAccuracyMeters"
    )
    average_speed_mps: Optional[float] = Field(
        default=None, serialization_alias="averageSpeedMps"
    )
    holes_visited: List[int] = Field(default_factory=list, serialization_alias="holesVisited")
    shot_count: int = Field(default=0, serialization_alias="shotCount")
    total_shot_distance_meters: float = Field(
        default=0.0, serialization_alias="totalShotDistanceMeters"
    )

    model_config = ConfigDict(populate_by_name=True)


def location_history(
    repository: LocationRepository,
    user_id: str,
    round_id: str,
    since: Optional[datetime] = None,
) -> List[EnrichedLocation]:
    return repository.list_locations(user_id, round_id, since=since)


def shot_history(
    repository: LocationRepository,
    user_id: str,
    round_id: str,
    hole_number: Optional[int] = None,
) -> List[ShotEvent]:
    return repository.list_shots(user_id, round_id, hole_number=hole_number)


def hole_position_distribution(
    repository: LocationRepository,
    user_id: str,
    course_id: str,
    hole_number: int,
) -> HolePositionDistribution:
    """How a user's fixes on one hole split across zones, over all rounds."""

    buckets: Dict[PositionOnHole, List[EnrichedLocation]] = {}
    for record in repository.iter_user_locations(user_id):
        if record.course_id != course_id or record.current_hole != hole_number:
            continue
        buckets.setdefault(record.position_on_hole, []).append(record)

    positions: List[PositionSummary] = []
    for position in PositionOnHole:
        records = buckets.get(position)
        if not records:
            continue
        to_pin = [
            r.distance_to_pin_meters for r in records if r.distance_to_pin_meters is not None
        ]
        positions.append(
            PositionSummary(
                position=position,
                count=len(records),
                average_distance_to_pin_meters=fmean(to_pin) if to_pin else None,
                min_distance_to_pin_meters=min(to_pin) if to_pin else None,
                max_distance_to_pin_meters=max(to_pin) if to_pin else None,
            )
        )
    positions.sort(key=lambda p: p.count, reverse=True)
    return HolePositionDistribution(
        course_id=course_id,
        hole_number=hole_number,
        total=sum(p.count for p in positions),
        positions=positions,
    )


def location_statistics(
    repository: LocationRepository, user_id: str, round_id: str
) -> LocationStatistics:
    records = repository.list_locations(user_id, round_id)
    shots = repository.list_shots(user_id, round_id)
    stats = LocationStatistics(
        user_id=user_id,
        round_id=round_id,
        fix_count=len(records),
        shot_count=len(shots),
        total_shot_distance_meters=sum(s.distance_meters for s in shots),
    )
    if not records:
        return stats

    accuracies = [r.accuracy_meters for r in records if r.accuracy_meters is not None]
    speeds = [r.speed_mps for r in records if r.speed_mps is not None]
    first, last = records[0].timestamp, records[-1].timestamp
    stats.first_fix_at = first
    stats.last_fix_at = last
    stats.elapsed_seconds = (last - first).total_seconds()
    stats.average_accuracy_meters = fmean(accuracies) if accuracies else None
    stats.average_speed_mps = fmean(speeds) if speeds else None
    stats.holes_visited = sorted(
        {r.current_hole for r in records if r.current_hole is not None}
    )
    return stats


__all__ = [
    "HolePositionDistribution",
    "LocationStatistics",
    "PositionSummary",
    "hole_position_distribution",
    "location_history",
    "location_statistics",
    "shot_history",
]
