from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status
from pydantic import BaseModel, ConfigDict, Field

from golfnav.api.user_header import UserIdHeader, UserIdQuery, resolve_player_id
from golfnav.courses.cache import CourseGeometryCache, get_course_cache
from golfnav.courses.provider import CourseGeometryError
from golfnav.courses.schemas import CourseGeometry
from golfnav.location.analytics import HolePositionDistribution, hole_position_distribution
from golfnav.location.repository import LocationRepository, get_location_repository
from golfnav.security import require_admin_token, require_api_key

router = APIRouter(
    prefix="/api/courses",
    tags=["courses"],
    dependencies=[Depends(require_api_key)],
)

logger = logging.getLogger(__name__)


class InvalidateOut(BaseModel):
    course_id: str = Field(serialization_alias="courseId")
    invalidated: bool

    model_config = ConfigDict(populate_by_name=True)


def _load_course(cache: CourseGeometryCache, course_id: str) -> CourseGeometry:
    try:
        resolved = cache.get(course_id)
    except CourseGeometryError as exc:
        logger.exception("course geometry unreadable", extra={"course_id": course_id})
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        )
    if resolved is None:
        raise HTTPException(status_code=404, detail="course_not_found")
    return resolved.geometry


@router.get("", response_model=List[str])
def list_courses(cache: CourseGeometryCache = Depends(get_course_cache)) -> List[str]:
    return cache.provider.list_course_ids()


@router.get("/{course_id}/geometry", response_model=CourseGeometry)
def get_course_geometry(
    course_id: str, cache: CourseGeometryCache = Depends(get_course_cache)
) -> CourseGeometry:
    return _load_course(cache, course_id)


@router.post("/{course_id}/invalidate", response_model=InvalidateOut)
def invalidate_course(
    course_id: str,
    _admin: str = Depends(require_admin_token),
    cache: CourseGeometryCache = Depends(get_course_cache),
) -> InvalidateOut:
    return InvalidateOut(course_id=course_id, invalidated=cache.invalidate(course_id))


@router.get(
    "/{course_id}/holes/{hole_number}/positions",
    response_model=HolePositionDistribution,
)
def get_hole_positions(
    course_id: str,
    hole_number: int = Path(ge=1),
    user_id: UserIdHeader = None,
    user_id_query: UserIdQuery = None,
    cache: CourseGeometryCache = Depends(get_course_cache),
    repository: LocationRepository = Depends(get_location_repository),
) -> HolePositionDistribution:
    course = _load_course(cache, course_id)
    if course.hole(hole_number) is None:
        raise HTTPException(status_code=404, detail="hole_not_found")
    player_id = resolve_player_id(user_id, user_id_query)
    return hole_position_distribution(repository, player_id, course_id, hole_number)


__all__ = ["router"]
