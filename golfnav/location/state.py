"""Keyed per-round state shared by every fix of the same round."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime
from functools import lru_cache
from threading import Lock
from typing import Callable, Iterator, Optional

from golfnav.config import get_settings
from golfnav.geo import Coordinate

from .models import EnrichedLocation, RoundKey, ShotEvent

logger = logging.getLogger(__name__)


@dataclass
class RoundState:
    last_timestamp: Optional[datetime] = None
    last_record: Optional[EnrichedLocation] = None
    anchor: Optional[Coordinate] = None
    last_shot: Optional[ShotEvent] = None

    def copy(self) -> "RoundState":
        return replace(self)


@dataclass
class _Slot:
    lock: Lock = field(default_factory=Lock)
    state: Optional[RoundState] = None
    # callers holding or waiting on ``lock``
    users: int = 0
    touched_at: float = 0.0


class RoundStateStore:
    """Map of ``(user_id, round_id)`` to :class:`RoundState`.

    Callers take :meth:`lock` for the whole read-modify-write of one round so
    fixes of the same round are serialized while other rounds proceed.

    The store is bounded: beyond ``cap`` rounds the least recently used one
    is dropped, and rounds untouched for ``idle_seconds`` are dropped as well.
    A round whose lock is held or awaited is never dropped. Dropped rounds are
    rebuilt from stored history on their next fix.
    """

    def __init__(
        self,
        *,
        cap: int = 10_000,
        idle_seconds: float = 6 * 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cap = max(1, int(cap))
        self._idle = max(1.0, float(idle_seconds))
        self._clock = clock
        self._slots: "OrderedDict[RoundKey, _Slot]" = OrderedDict()
        self._guard = Lock()

    def _touch(self, key: RoundKey) -> _Slot:
        slot = self._slots.get(key)
        if slot is None:
            slot = self._slots[key] = _Slot()
        slot.touched_at = self._clock()
        self._slots.move_to_end(key)
        return slot

    def _evict(self) -> None:
        now = self._clock()
        evicted = 0
        for key, slot in list(self._slots.items()):
            over_cap = len(self._slots) > self._cap
            idle = now - slot.touched_at > self._idle
            if not (over_cap or idle):
                break
            if slot.users:
                continue
            del self._slots[key]
            evicted += 1
        if evicted:
            logger.debug("evicted round state", extra={"evicted": evicted})

    @contextmanager
    def lock(self, key: RoundKey) -> Iterator[None]:
        with self._guard:
            slot = self._touch(key)
            slot.users += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._guard:
                slot.users -= 1
                self._evict()

    def get(self, key: RoundKey) -> Optional[RoundState]:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                return None
            slot.touched_at = self._clock()
            self._slots.move_to_end(key)
            return slot.state

    def put(self, key: RoundKey, state: RoundState) -> None:
        with self._guard:
            self._touch(key).state = state
            self._evict()

    def discard(self, key: RoundKey) -> None:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                return
            slot.state = None
            if not slot.users:
                del self._slots[key]

    def clear(self) -> None:
        with self._guard:
            for key, slot in list(self._slots.items()):
                slot.state = None
                if not slot.users:
                    del self._slots[key]

    @property
    def tracked_rounds(self) -> int:
        """Rounds with a state or a lock in use, i.e. everything held in memory."""

        with self._guard:
            return len(self._slots)

    def __len__(self) -> int:
        with self._guard:
            return sum(1 for slot in self._slots.values() if slot.state is not None)


@lru_cache(maxsize=1)
def get_round_state_store() -> RoundStateStore:
    settings = get_settings()
    return RoundStateStore(
        cap=settings.round_state_cap, idle_seconds=settings.round_state_idle_s
    )


__all__ = ["RoundState", "RoundStateStore", "get_round_state_store"]
