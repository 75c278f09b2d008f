"""Per-fix enrichment: hole, zone, boundary, distances and shot detection."""

from .boundary import is_within_course
from .classifier import classify
from .hole_locator import locate_hole
from .models import EnrichedLocation, EnrichmentResult, LocationFix, ShotEvent
from .repository import LocationPersistenceError, LocationRepository, get_location_repository
from .service import LocationStateUpdater, OutOfOrderFixError, get_location_service
from .shots import ShotSequencer
from .state import RoundState, RoundStateStore, get_round_state_store

__all__ = [
    "EnrichedLocation",
    "EnrichmentResult",
    "LocationFix",
    "LocationPersistenceError",
    "LocationRepository",
    "LocationStateUpdater",
    "OutOfOrderFixError",
    "RoundState",
    "RoundStateStore",
    "ShotEvent",
    "ShotSequencer",
    "classify",
    "get_location_repository",
    "get_location_service",
    "get_round_state_store",
    "is_within_course",
    "locate_hole",
]
