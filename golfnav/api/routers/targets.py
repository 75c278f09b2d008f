from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from golfnav.clubs.mapper import recommend_club
from golfnav.clubs.targets import TargetDistance, describe_target
from golfnav.geo import Coordinate
from golfnav.security import require_api_key

router = APIRouter(tags=["targets"], dependencies=[Depends(require_api_key)])


class TargetIn(BaseModel):
    current: Coordinate
    target: Coordinate


class ClubRecommendationOut(BaseModel):
    yards: float
    club: str


@router.post("/api/targets", response_model=TargetDistance)
def post_target(payload: TargetIn) -> TargetDistance:
    return describe_target(payload.current, payload.target)


@router.get("/api/clubs/recommend", response_model=ClubRecommendationOut)
def get_club_recommendation(yards: float = Query(..., ge=0)) -> ClubRecommendationOut:
    try:
        club = recommend_club(yards)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return ClubRecommendationOut(yards=yards, club=club)


__all__ = ["router"]
