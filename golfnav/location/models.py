from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from golfnav.courses.schemas import PositionOnHole
from golfnav.geo import Coordinate

RoundKey = Tuple[str, Optional[str]]


class LocationFix(BaseModel):
    """One timestamped GPS reading submitted by the client."""

    coordinate: Coordinate
    accuracy_meters: Optional[float] = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("accuracy_meters", "accuracyMeters"),
        serialization_alias="accuracyMeters",
    )
    altitude: Optional[float] = Field(default=None, allow_inf_nan=False)
    heading_degrees: Optional[float] = Field(
        default=None,
        ge=0,
        lt=360,
        allow_inf_nan=False,
        validation_alias=AliasChoices("heading_degrees", "headingDegrees"),
        serialization_alias="headingDegrees",
    )
    speed_mps: Optional[float] = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        validation_alias=AliasChoices("speed_mps", "speedMps"),
        serialization_alias="speedMps",
    )
    timestamp: datetime
    user_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("user_id", "userId"),
        serialization_alias="userId",
    )
    round_id: Optional[str] = Field(
        default=None,
        min_length=1,
        validation_alias=AliasChoices("round_id", "roundId"),
        serialization_alias="roundId",
    )
    course_id: Optional[str] = Field(
        default=None,
        min_length=1,
        validation_alias=AliasChoices("course_id", "courseId"),
        serialization_alias="courseId",
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @field_validator("timestamp")
    @classmethod
    def _require_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("timestamp must include a UTC offset")
        return value.astimezone(timezone.utc)

    @property
    def round_key(self) -> RoundKey:
        return self.user_id, self.round_id


class EnrichedLocation(LocationFix):
    """A fix plus the golf context derived from it."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    current_hole: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("current_hole", "currentHole"),
        serialization_alias="currentHole",
    )
    position_on_hole: PositionOnHole = Field(
        default=PositionOnHole.UNKNOWN,
        validation_alias=AliasChoices("position_on_hole", "positionOnHole"),
        serialization_alias="positionOnHole",
    )
    distance_to_tee_meters: Optional[float] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("distance_to_tee_meters", "distanceToTeeMeters"),
        serialization_alias="distanceToTeeMeters",
    )
    distance_to_pin_meters: Optional[float] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("distance_to_pin_meters", "distanceToPinMeters"),
        serialization_alias="distanceToPinMeters",
    )
    within_course_boundary: bool = Field(
        default=False,
        validation_alias=AliasChoices("within_course_boundary", "withinCourseBoundary"),
        serialization_alias="withinCourseBoundary",
    )
    last_shot_distance_meters: Optional[float] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices(
            "last_shot_distance_meters", "lastShotDistanceMeters"
        ),
        serialization_alias="lastShotDistanceMeters",
    )
    last_shot_location: Optional[Coordinate] = Field(
        default=None,
        validation_alias=AliasChoices("last_shot_location", "lastShotLocation"),
        serialization_alias="lastShotLocation",
    )
    persisted: bool = False
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ShotEvent(BaseModel):
    user_id: str = Field(
        validation_alias=AliasChoices("user_id", "userId"),
        serialization_alias="userId",
    )
    round_id: str = Field(
        validation_alias=AliasChoices("round_id", "roundId"),
        serialization_alias="roundId",
    )
    hole_number: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("hole_number", "holeNumber"),
        serialization_alias="holeNumber",
    )
    from_location: Coordinate = Field(
        validation_alias=AliasChoices("from_location", "fromLocation"),
        serialization_alias="fromLocation",
    )
    to_location: Coordinate = Field(
        validation_alias=AliasChoices("to_location", "toLocation"),
        serialization_alias="toLocation",
    )
    distance_meters: float = Field(
        ge=0,
        validation_alias=AliasChoices("distance_meters", "distanceMeters"),
        serialization_alias="distanceMeters",
    )
    timestamp: datetime

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class EnrichmentResult:
    location: EnrichedLocation
    shot_event: Optional[ShotEvent] = None
    duplicate: bool = False


__all__ = [
    "EnrichedLocation",
    "EnrichmentResult",
    "LocationFix",
    "PositionOnHole",
    "RoundKey",
    "ShotEvent",
]
