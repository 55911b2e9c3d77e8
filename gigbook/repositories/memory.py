"""
Volatile backend: process-lifetime collections held in memory.

Used when the database is unreachable at startup. Every operation mirrors the
durable backend's observable behaviour, including the synthesized empty stage
plot on a read miss. Nothing here survives a restart.
"""
from __future__ import annotations

import copy
import dataclasses
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Generic, Mapping, Optional, Sequence, TypeVar

from gigbook.domain import (
    Setlist,
    Show,
    Song,
    StageNode,
    StagePlot,
    StagePlotSummary,
    User,
    Venue,
    coerce_patch,
)

from .base import UNSET, EntityStore, RecordStore, StagePlotStore, UserStore, synthesize_stage_plot

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class MemoryCollection(EntityStore[T], Generic[T]):
    """Insertion-ordered list of records of one type."""

    def __init__(self, record_cls: type, lock: threading.Lock) -> None:
        self._record_cls = record_cls
        self._lock = lock
        self._items: list[T] = []

    def _index(self, owner_id: str, record_id: str) -> int:
        for idx, item in enumerate(self._items):
            if item.owner_id == owner_id and item.id == record_id:
                return idx
        return -1

    def list(self, owner_id: str) -> list[T]:
        with self._lock:
            return [copy.deepcopy(item) for item in self._items if item.owner_id == owner_id]

    def get(self, owner_id: str, record_id: str) -> Optional[T]:
        with self._lock:
            idx = self._index(owner_id, record_id)
            return copy.deepcopy(self._items[idx]) if idx >= 0 else None

    def create(self, owner_id: str, fields: Mapping[str, Any]) -> T:
        now = _now()
        record = self._record_cls(
            id=_new_id(),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            **copy.deepcopy(coerce_patch(self._record_cls, fields)),
        )
        with self._lock:
            self._items.append(record)
            return copy.deepcopy(record)

    def update(self, owner_id: str, record_id: str, patch: Mapping[str, Any]) -> Optional[T]:
        values = copy.deepcopy(coerce_patch(self._record_cls, patch))
        with self._lock:
            idx = self._index(owner_id, record_id)
            if idx < 0:
                return None
            # replace() builds a new record, so a failed merge leaves the old one intact
            updated = dataclasses.replace(self._items[idx], updated_at=_now(), **values)
            self._items[idx] = updated
            return copy.deepcopy(updated)

    def delete(self, owner_id: str, record_id: str) -> bool:
        with self._lock:
            idx = self._index(owner_id, record_id)
            if idx < 0:
                return False
            del self._items[idx]
            return True

    def clear(self) -> None:
        with self._lock:
            self._items = []


class MemoryStagePlots(StagePlotStore):
    def __init__(self, lock: threading.Lock) -> None:
        self._lock = lock
        self._plots: list[StagePlot] = []

    def _find(self, owner_id: str, context_id: str) -> Optional[StagePlot]:
        for plot in self._plots:
            if plot.owner_id == owner_id and plot.context_id == context_id:
                return plot
        return None

    def list(self, owner_id: str) -> list[StagePlotSummary]:
        with self._lock:
            return [
                StagePlotSummary(context_id=p.context_id, name=p.name)
                for p in self._plots
                if p.owner_id == owner_id
            ]

    def get(self, owner_id: str, context_id: str) -> StagePlot:
        with self._lock:
            plot = self._find(owner_id, context_id)
            if plot is None:
                return synthesize_stage_plot(owner_id, context_id)
            return copy.deepcopy(plot)

    def upsert(
        self,
        owner_id: str,
        context_id: str,
        nodes: Sequence[StageNode | Mapping[str, Any]],
        name: Optional[str] = UNSET,
    ) -> StagePlot:
        node_list = copy.deepcopy(coerce_patch(StagePlot, {"nodes": list(nodes or [])})["nodes"])
        now = _now()
        with self._lock:
            plot = self._find(owner_id, context_id)
            if plot is None:
                plot = StagePlot(
                    id=_new_id(),
                    owner_id=owner_id,
                    context_id=context_id,
                    name=None if name is UNSET else name,
                    nodes=node_list,
                    created_at=now,
                    updated_at=now,
                )
                self._plots.append(plot)
            else:
                plot.nodes = node_list
                if name is not UNSET:
                    plot.name = name
                plot.updated_at = now
            return copy.deepcopy(plot)

    def delete(self, owner_id: str, context_id: str) -> bool:
        with self._lock:
            plot = self._find(owner_id, context_id)
            if plot is None:
                return False
            self._plots.remove(plot)
            return True

    def clear(self) -> None:
        with self._lock:
            self._plots = []


class MemoryUsers(UserStore):
    def __init__(self, lock: threading.Lock) -> None:
        self._lock = lock
        self._users: list[User] = []

    def _find(self, owner_id: str) -> Optional[User]:
        return next((u for u in self._users if u.owner_id == owner_id), None)

    def get(self, owner_id: str) -> Optional[User]:
        with self._lock:
            user = self._find(owner_id)
            return copy.deepcopy(user) if user else None

    def ensure(self, owner_id: str, handle: Optional[str] = None) -> User:
        with self._lock:
            user = self._find(owner_id)
            if user is None:
                now = _now()
                user = User(owner_id=owner_id, handle=handle, preferences={}, created_at=now, updated_at=now)
                self._users.append(user)
            return copy.deepcopy(user)

    def update(self, owner_id: str, patch: Mapping[str, Any]) -> Optional[User]:
        values = copy.deepcopy(coerce_patch(User, patch))
        with self._lock:
            user = self._find(owner_id)
            if user is None:
                return None
            if "handle" in values:
                user.handle = values["handle"]
            if "preferences" in values:
                user.preferences = {**user.preferences, **(values["preferences"] or {})}
            user.updated_at = _now()
            return copy.deepcopy(user)

    def clear(self) -> None:
        with self._lock:
            self._users = []


class MemoryStore(RecordStore):
    """Volatile backend. Owned by the process; only its own methods mutate it."""

    name = "volatile"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.songs = MemoryCollection(Song, self._lock)
        self.venues = MemoryCollection(Venue, self._lock)
        self.setlists = MemoryCollection(Setlist, self._lock)
        self.shows = MemoryCollection(Show, self._lock)
        self.stageplots = MemoryStagePlots(self._lock)
        self.users = MemoryUsers(self._lock)

    def reset_all(self) -> None:
        for collection in (self.songs, self.venues, self.setlists, self.shows, self.stageplots, self.users):
            collection.clear()
