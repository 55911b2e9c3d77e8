"""Repository facade: the one call surface request handlers use.

Each call asks the selector for the active store and forwards to it verbatim.
Nothing is cached between calls, and the facade adds no errors of its own.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from gigbook.domain import StageNode, StagePlot, StagePlotSummary, User

from .base import UNSET
from .selector import BackendSelector


class EntityRepository:
    def __init__(self, selector: BackendSelector, attr: str) -> None:
        self._selector = selector
        self._attr = attr

    def _store(self):
        return getattr(self._selector.store, self._attr)

    def list(self, owner_id: str) -> list:
        return self._store().list(owner_id)

    def get(self, owner_id: str, record_id: str):
        return self._store().get(owner_id, record_id)

    def create(self, owner_id: str, fields: Mapping[str, Any]):
        return self._store().create(owner_id, fields)

    def update(self, owner_id: str, record_id: str, patch: Mapping[str, Any]):
        return self._store().update(owner_id, record_id, patch)

    def delete(self, owner_id: str, record_id: str) -> bool:
        return self._store().delete(owner_id, record_id)


class StagePlotRepository:
    def __init__(self, selector: BackendSelector) -> None:
        self._selector = selector

    def list(self, owner_id: str) -> list[StagePlotSummary]:
        return self._selector.store.stageplots.list(owner_id)

    def get(self, owner_id: str, context_id: str) -> StagePlot:
        return self._selector.store.stageplots.get(owner_id, context_id)

    def upsert(
        self,
        owner_id: str,
        context_id: str,
        nodes: Sequence[StageNode | Mapping[str, Any]],
        name: Optional[str] = UNSET,
    ) -> StagePlot:
        return self._selector.store.stageplots.upsert(owner_id, context_id, nodes, name)

    def delete(self, owner_id: str, context_id: str) -> bool:
        return self._selector.store.stageplots.delete(owner_id, context_id)


class UserRepository:
    def __init__(self, selector: BackendSelector) -> None:
        self._selector = selector

    def get(self, owner_id: str) -> Optional[User]:
        return self._selector.store.users.get(owner_id)

    def ensure(self, owner_id: str, handle: Optional[str] = None) -> User:
        return self._selector.store.users.ensure(owner_id, handle)

    def update(self, owner_id: str, patch: Mapping[str, Any]) -> Optional[User]:
        return self._selector.store.users.update(owner_id, patch)


class Repository:
    """Per-entity repositories bound to one selector."""

    def __init__(self, selector: BackendSelector) -> None:
        self.selector = selector
        self.songs = EntityRepository(selector, "songs")
        self.venues = EntityRepository(selector, "venues")
        self.setlists = EntityRepository(selector, "setlists")
        self.shows = EntityRepository(selector, "shows")
        self.stageplots = StagePlotRepository(selector)
        self.users = UserRepository(selector)

    def health(self):
        return self.selector.diagnostics()
