from __future__ import annotations

import hashlib
import json
import logging
import re
from pathlib import Path
from threading import Lock
from typing import Dict, Iterable, List, Mapping, Optional, Protocol

from pydantic import ValidationError

from .schemas import CourseGeometry

logger = logging.getLogger(__name__)

SAFE_COURSE_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class CourseGeometryError(ValueError):
    """Raised when stored course geometry exists but cannot be parsed."""


class CourseGeometryProvider(Protocol):
    """Read-only source of digitized course geometry."""

    def get_course_geometry(self, course_id: str) -> Optional[CourseGeometry]:
        ...

    def list_course_ids(self) -> List[str]:
        ...


class InMemoryCourseGeometryProvider:
    def __init__(self, courses: Iterable[CourseGeometry] = ()) -> None:
        self._lock = Lock()
        self._courses: Dict[str, CourseGeometry] = {c.course_id: c for c in courses}

    def get_course_geometry(self, course_id: str) -> Optional[CourseGeometry]:
        with self._lock:
            return self._courses.get(course_id)

    def list_course_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._courses.keys())

    def put(self, course: CourseGeometry) -> None:
        with self._lock:
            self._courses[course.course_id] = course


class FileCourseGeometryProvider:
    """Course geometry stored as ``<base_dir>/<course_id>.json`` documents."""

    def __init__(self, base_dir: Path | str) -> None:
        self._base_dir = Path(base_dir).expanduser().resolve()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _course_path(self, course_id: str) -> Optional[Path]:
        if not SAFE_COURSE_ID_RE.match(course_id):
            logger.warning("rejecting unsafe course id %r", course_id)
            return None
        return self._base_dir / f"{course_id}.json"

    def get_course_geometry(self, course_id: str) -> Optional[CourseGeometry]:
        path = self._course_path(course_id)
        if path is None or not path.exists():
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            raise CourseGeometryError(f"unreadable geometry for {course_id}: {exc}") from exc
        geometry = parse_course_geometry(payload, source=str(path))
        if geometry.course_id != course_id:
            raise CourseGeometryError(
                f"{path}: courseId {geometry.course_id!r} does not match file name {course_id!r}"
            )
        return geometry

    def list_course_ids(self) -> List[str]:
        if not self._base_dir.exists():
            return []
        return sorted(
            path.stem
            for path in self._base_dir.glob("*.json")
            if SAFE_COURSE_ID_RE.match(path.stem)
        )

    def fingerprint(self, course_id: str) -> Optional[str]:
        """Cheap change marker built from file size and mtime."""

        path = self._course_path(course_id)
        if path is None or not path.exists():
            return None
        stat = path.stat()
        hasher = hashlib.sha256()
        hasher.update(str(stat.st_mtime_ns).encode("utf-8"))
        hasher.update(str(stat.st_size).encode("utf-8"))
        return hasher.hexdigest()


def parse_course_geometry(payload: Mapping[str, object], *, source: str) -> CourseGeometry:
    """Validate a raw geometry document, filling in hole ``courseId`` fields."""

    if not isinstance(payload, Mapping):
        raise CourseGeometryError(f"{source}: geometry document must be an object")
    data = dict(payload)
    course_id = data.get("courseId") or data.get("course_id") or data.get("id")
    holes = data.get("holes") or []
    if isinstance(holes, list):
        data["holes"] = [
            {"courseId": course_id, **hole} if isinstance(hole, dict) else hole
            for hole in holes
        ]
    try:
        return CourseGeometry.model_validate(data)
    except ValidationError as exc:
        raise CourseGeometryError(f"{source}: {exc}") from exc


__all__ = [
    "CourseGeometryError",
    "CourseGeometryProvider",
    "FileCourseGeometryProvider",
    "InMemoryCourseGeometryProvider",
    "parse_course_geometry",
]
