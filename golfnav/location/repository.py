"""Append-only JSONL storage for enriched locations and shot events.

Layout under the base directory::

    <user>/<round>/locations.jsonl
    <user>/<round>/shots.jsonl

Fixes without a round are stored under ``_unassigned``.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Callable, Iterable, Iterator, List, Optional, TypeVar

from pydantic import BaseModel

from golfnav.config import get_settings

from .models import EnrichedLocation, ShotEvent

logger = logging.getLogger(__name__)

SAFE_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
UNASSIGNED_ROUND = "_unassigned"

LOCATIONS_FILE = "locations.jsonl"
SHOTS_FILE = "shots.jsonl"

T = TypeVar("T", bound=BaseModel)


class LocationPersistenceError(Exception):
    """Raised when an enriched location or shot cannot be written durably."""


def _path_segment(value: str) -> str:
    """Map an id onto a filesystem-safe directory name.

    Ids made of letters, digits, ``_`` and ``-`` are used as is; anything else
    is replaced by a digest so user supplied ids never escape the base dir.
    """

    if SAFE_SEGMENT_RE.match(value) and not value.startswith("_"):
        return value
    return "h-" + hashlib.sha256(value.encode("utf-8")).hexdigest()[:32]


class LocationRepository:
    def __init__(self, base_dir: Path | str) -> None:
        self._base_dir = Path(base_dir).expanduser().resolve()
        self._lock = Lock()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _user_dir(self, user_id: str) -> Path:
        return self._base_dir / _path_segment(user_id)

    def _round_dir(self, user_id: str, round_id: Optional[str]) -> Path:
        segment = _path_segment(round_id) if round_id else UNASSIGNED_ROUND
        return self._user_dir(user_id) / segment

    # Writes
    def append_location(self, record: EnrichedLocation) -> EnrichedLocation:
        """Append ``record`` and return it flagged as persisted."""

        stored = record.model_copy(update={"persisted": True})
        self._append(
            self._round_dir(record.user_id, record.round_id) / LOCATIONS_FILE,
            stored.to_dict(),
        )
        return stored

    def append_shot(self, shot: ShotEvent) -> ShotEvent:
        self._append(self._round_dir(shot.user_id, shot.round_id) / SHOTS_FILE, shot.to_dict())
        return shot

    def _append(self, path: Path, payload: dict) -> None:
        line = json.dumps(payload, sort_keys=True)
        try:
            with self._lock:
                path.parent.mkdir(parents=True, exist_ok=True)
                with path.open("a", encoding="utf-8") as f:
                    f.write(line)
                    f.write("\n")
        except OSError as exc:
            raise LocationPersistenceError(f"could not append to {path}: {exc}") from exc

    # Reads
    def list_locations(
        self,
        user_id: str,
        round_id: Optional[str],
        *,
        since: Optional[datetime] = None,
    ) -> List[EnrichedLocation]:
        path = self._round_dir(user_id, round_id) / LOCATIONS_FILE
        records = _dedupe_by_id(self._read(path, EnrichedLocation.model_validate))
        if since is not None:
            records = [r for r in records if r.timestamp >= since]
        records.sort(key=lambda r: r.timestamp)
        return records

    def list_shots(
        self,
        user_id: str,
        round_id: str,
        *,
        hole_number: Optional[int] = None,
    ) -> List[ShotEvent]:
        path = self._round_dir(user_id, round_id) / SHOTS_FILE
        shots = list(self._read(path, ShotEvent.model_validate))
        if hole_number is not None:
            shots = [s for s in shots if s.hole_number == hole_number]
        shots.sort(key=lambda s: s.timestamp)
        return shots

    def iter_user_locations(self, user_id: str) -> Iterator[EnrichedLocation]:
        """Every stored location of ``user_id`` across rounds, unordered."""

        user_dir = self._user_dir(user_id)
        if not user_dir.exists():
            return
        for round_dir in sorted(user_dir.iterdir()):
            path = round_dir / LOCATIONS_FILE
            yield from _dedupe_by_id(self._read(path, EnrichedLocation.model_validate))

    def _read(self, path: Path, parse: Callable[[object], T]) -> Iterator[T]:
        if not path.exists():
            return
        try:
            with path.open("r", encoding="utf-8") as f:
                lines = f.readlines()
        except OSError as exc:
            raise LocationPersistenceError(f"could not read {path}: {exc}") from exc
        for lineno, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield parse(json.loads(line))
            except ValueError:
                logger.warning(
                    "skipping unreadable record",
                    extra={"path": str(path), "line": lineno},
                )


def _dedupe_by_id(records: Iterable[EnrichedLocation]) -> List[EnrichedLocation]:
    # A duplicate fix whose first write failed is appended again on retry;
    # only the first durable copy of an id counts.
    seen: set[str] = set()
    unique: List[EnrichedLocation] = []
    for record in records:
        if record.id in seen:
            continue
        seen.add(record.id)
        unique.append(record)
    return unique


@lru_cache(maxsize=1)
def get_location_repository() -> LocationRepository:
    return LocationRepository(get_settings().locations_dir)


__all__ = [
    "LocationPersistenceError",
    "LocationRepository",
    "get_location_repository",
]
