from __future__ import annotations

import math
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InvalidCoordinateError(ValueError):
    """Raised when a latitude/longitude pair is not a valid WGS84 position."""


def check_lat_lon(latitude: float, longitude: float) -> None:
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidCoordinateError(
            f"coordinate must be finite, got ({latitude!r}, {longitude!r})"
        )
    if not -90.0 <= latitude <= 90.0:
        raise InvalidCoordinateError(f"latitude out of range: {latitude!r}")
    if not -180.0 <= longitude <= 180.0:
        raise InvalidCoordinateError(f"longitude out of range: {longitude!r}")


class Coordinate(BaseModel):
    """WGS84 position in degrees."""

    latitude: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def of(cls, latitude: float, longitude: float) -> "Coordinate":
        """Build a coordinate, raising ``InvalidCoordinateError`` on bad input."""

        check_lat_lon(float(latitude), float(longitude))
        return cls(latitude=latitude, longitude=longitude)


class GeoPolyline(BaseModel):
    """Ordered line string, e.g. a fairway centre line from tee to green."""

    points: List[Coordinate] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class GeoPolygon(BaseModel):
    """Polygon described by rings in WGS84 coordinates.

    The first ring is the exterior; any further rings are interior holes.
    Rings may be open or closed.
    """

    rings: List[List[Coordinate]] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @field_validator("rings")
    @classmethod
    def _drop_empty_rings(cls, rings: List[List[Coordinate]]) -> List[List[Coordinate]]:
        return [ring for ring in rings if ring]

    @property
    def exterior(self) -> List[Coordinate]:
        return self.rings[0] if self.rings else []

    @property
    def interiors(self) -> List[List[Coordinate]]:
        return self.rings[1:]


__all__ = [
    "Coordinate",
    "GeoPolygon",
    "GeoPolyline",
    "InvalidCoordinateError",
    "check_lat_lon",
]
