from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field

from golfnav.api.user_header import UserIdHeader, UserIdQuery, resolve_player_id
from golfnav.location.analytics import (
    LocationStatistics,
    location_history,
    location_statistics,
    shot_history,
)
from golfnav.location.models import EnrichedLocation, LocationFix, ShotEvent
from golfnav.location.repository import (
    LocationPersistenceError,
    LocationRepository,
    get_location_repository,
)
from golfnav.location.service import (
    LocationStateUpdater,
    OutOfOrderFixError,
    get_location_service,
)
from golfnav.security import require_api_key

router = APIRouter(tags=["locations"], dependencies=[Depends(require_api_key)])

logger = logging.getLogger(__name__)


class EnrichmentOut(BaseModel):
    location: EnrichedLocation
    shot_event: Optional[ShotEvent] = Field(default=None, serialization_alias="shotEvent")
    duplicate: bool = False

    model_config = ConfigDict(populate_by_name=True)


@router.post("/api/locations", response_model=EnrichmentOut)
def post_location(
    fix: LocationFix,
    response: Response,
    user_id: UserIdHeader = None,
    service: LocationStateUpdater = Depends(get_location_service),
) -> EnrichmentOut:
    resolve_player_id(user_id, fix.user_id)
    try:
        result = service.enrich(fix)
    except OutOfOrderFixError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": "fix is older than the last accepted fix",
                "lastTimestamp": exc.last_timestamp.isoformat(),
            },
        )

    response.status_code = (
        status.HTTP_201_CREATED if result.location.persisted else status.HTTP_202_ACCEPTED
    )
    return EnrichmentOut(
        location=result.location,
        shot_event=result.shot_event,
        duplicate=result.duplicate,
    )


@router.get("/api/rounds/{round_id}/locations", response_model=List[EnrichedLocation])
def get_round_locations(
    round_id: str,
    since: Optional[datetime] = Query(default=None),
    user_id: UserIdHeader = None,
    user_id_query: UserIdQuery = None,
    repository: LocationRepository = Depends(get_location_repository),
) -> List[EnrichedLocation]:
    player_id = resolve_player_id(user_id, user_id_query)
    try:
        return location_history(repository, player_id, round_id, since=since)
    except LocationPersistenceError:
        logger.exception("failed to read location history", extra={"round_id": round_id})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="location history unavailable",
        )


@router.get("/api/rounds/{round_id}/shots", response_model=List[ShotEvent])
def get_round_shots(
    round_id: str,
    hole: Optional[int] = Query(default=None, ge=1),
    user_id: UserIdHeader = None,
    user_id_query: UserIdQuery = None,
    repository: LocationRepository = Depends(get_location_repository),
) -> List[ShotEvent]:
    player_id = resolve_player_id(user_id, user_id_query)
    try:
        return shot_history(repository, player_id, round_id, hole_number=hole)
    except LocationPersistenceError:
        logger.exception("failed to read shot history", extra={"round_id": round_id})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="shot history unavailable",
        )


@router.get("/api/rounds/{round_id}/stats", response_model=LocationStatistics)
def get_round_stats(
    round_id: str,
    user_id: UserIdHeader = None,
    user_id_query: UserIdQuery = None,
    repository: LocationRepository = Depends(get_location_repository),
) -> LocationStatistics:
    player_id = resolve_player_id(user_id, user_id_query)
    try:
        return location_statistics(repository, player_id, round_id)
    except LocationPersistenceError:
        logger.exception("failed to read round statistics", extra={"round_id": round_id})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="round statistics unavailable",
        )


__all__ = ["router"]
