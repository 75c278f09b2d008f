from __future__ import annotations

from golfnav.courses.backends import GeometryBackend, ResolvedRadii
from golfnav.courses.schemas import HoleGeometry, PositionOnHole
from golfnav.geo import Coordinate, distance


def classify(
    point: Coordinate,
    hole: HoleGeometry | None,
    radii: ResolvedRadii,
    backend: GeometryBackend,
) -> PositionOnHole:
    """Classify ``point`` into a zone of ``hole``; first matching rule wins.

    Tee and green are radius checks around the tee and pin. Hazards, the
    fairway corridor and the hole boundary are delegated to ``backend`` since
    they depend on how much of the hole has been digitized. Anything left
    over is rough. ``unknown`` only applies when no hole was located.

    Raises ``DistanceComputationError`` when the hole geometry is degenerate.
    """

    if hole is None:
        return PositionOnHole.UNKNOWN
    if distance(point, hole.tee_point) <= radii.tee_radius_m:
        return PositionOnHole.TEE
    if distance(point, hole.pin_point) <= radii.green_radius_m:
        return PositionOnHole.GREEN
    refined = backend.refine_zone(point, hole, radii)
    if refined is not None:
        return refined
    return PositionOnHole.ROUGH


__all__ = ["classify"]
