from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from golfnav.geo import Coordinate, GeoPolygon, GeoPolyline

HazardType = Literal["bunker", "water", "tree", "other"]


class PositionOnHole(str, Enum):
    TEE = "tee"
    FAIRWAY = "fairway"
    GREEN = "green"
    HAZARD = "hazard"
    ROUGH = "rough"
    UNKNOWN = "unknown"


class Hazard(BaseModel):
    id: str
    type: HazardType
    name: Optional[str] = None
    polygon: Optional[GeoPolygon] = None
    center: Optional[Coordinate] = None

    model_config = ConfigDict(frozen=True)


class ZoneRadii(BaseModel):
    """Per-course override of the zone classification radii (metres)."""

    tee_radius_m: Optional[float] = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("tee_radius_m", "teeRadiusM"),
        serialization_alias="teeRadiusM",
    )
    green_radius_m: Optional[float] = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("green_radius_m", "greenRadiusM"),
        serialization_alias="greenRadiusM",
    )
    fairway_half_width_m: Optional[float] = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("fairway_half_width_m", "fairwayHalfWidthM"),
        serialization_alias="fairwayHalfWidthM",
    )
    hazard_radius_m: Optional[float] = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("hazard_radius_m", "hazardRadiusM"),
        serialization_alias="hazardRadiusM",
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class HoleGeometry(BaseModel):
    course_id: str = Field(
        validation_alias=AliasChoices("course_id", "courseId"),
        serialization_alias="courseId",
    )
    hole_number: int = Field(
        ge=1,
        validation_alias=AliasChoices("hole_number", "holeNumber"),
        serialization_alias="holeNumber",
    )
    tee_point: Coordinate = Field(
        validation_alias=AliasChoices("tee_point", "teePoint"),
        serialization_alias="teePoint",
    )
    pin_point: Coordinate = Field(
        validation_alias=AliasChoices("pin_point", "pinPoint"),
        serialization_alias="pinPoint",
    )
    fairway_centerline: Optional[GeoPolyline] = Field(
        default=None,
        validation_alias=AliasChoices("fairway_centerline", "fairwayCenterline"),
        serialization_alias="fairwayCenterline",
    )
    hole_boundary: Optional[GeoPolygon] = Field(
        default=None,
        validation_alias=AliasChoices("hole_boundary", "holeBoundary"),
        serialization_alias="holeBoundary",
    )
    par: int = Field(default=4, ge=3, le=6)
    stroke_index: Optional[int] = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("stroke_index", "strokeIndex"),
        serialization_alias="strokeIndex",
    )
    hazards: List[Hazard] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def has_precise_geometry(self) -> bool:
        return (
            self.fairway_centerline is not None
            or self.hole_boundary is not None
            or any(hazard.polygon is not None for hazard in self.hazards)
        )


class CourseGeometry(BaseModel):
    course_id: str = Field(
        validation_alias=AliasChoices("course_id", "courseId", "id"),
        serialization_alias="courseId",
    )
    name: Optional[str] = None
    center_point: Coordinate = Field(
        validation_alias=AliasChoices("center_point", "centerPoint"),
        serialization_alias="centerPoint",
    )
    boundary_polygon: Optional[GeoPolygon] = Field(
        default=None,
        validation_alias=AliasChoices("boundary_polygon", "boundaryPolygon"),
        serialization_alias="boundaryPolygon",
    )
    holes: List[HoleGeometry] = Field(default_factory=list)
    zone_radii: Optional[ZoneRadii] = Field(
        default=None,
        validation_alias=AliasChoices("zone_radii", "zoneRadii"),
        serialization_alias="zoneRadii",
    )
    version: int = 1

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="after")
    def _check_holes(self) -> "CourseGeometry":
        seen: set[int] = set()
        for hole in self.holes:
            if hole.course_id != self.course_id:
                raise ValueError(
                    f"hole {hole.hole_number} belongs to course {hole.course_id!r}, "
                    f"not {self.course_id!r}"
                )
            if hole.hole_number in seen:
                raise ValueError(f"duplicate hole number {hole.hole_number}")
            seen.add(hole.hole_number)
        return self

    def hole(self, number: int) -> Optional[HoleGeometry]:
        return next((hole for hole in self.holes if hole.hole_number == number), None)


__all__ = [
    "CourseGeometry",
    "Hazard",
    "HazardType",
    "HoleGeometry",
    "PositionOnHole",
    "ZoneRadii",
]
