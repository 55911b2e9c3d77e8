"""Store interfaces shared by the volatile and durable backends.

Stores are swappable and return the record types from ``gigbook.domain``.
Absence is a normal result: reads return ``None``, deletes return ``False``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, Optional, Sequence, TypeVar

from gigbook.domain import StageNode, StagePlot, StagePlotSummary, User

T = TypeVar("T")


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Default for arguments where "not given" differs from an explicit None.
UNSET: Any = _Unset()


def synthesize_stage_plot(owner_id: str, context_id: str) -> StagePlot:
    """Empty canvas returned when no plot exists yet for ``(owner_id, context_id)``."""
    return StagePlot(owner_id=owner_id, context_id=context_id, nodes=[])


class EntityStore(ABC, Generic[T]):
    """CRUD + list for one entity type, scoped by owner."""

    @abstractmethod
    def list(self, owner_id: str) -> list[T]:
        """Return the owner's records in insertion order."""

    @abstractmethod
    def get(self, owner_id: str, record_id: str) -> Optional[T]:
        """Return the record, or None when the owner has no such record."""

    @abstractmethod
    def create(self, owner_id: str, fields: Mapping[str, Any]) -> T:
        """Store a new record with a fresh identifier and return it."""

    @abstractmethod
    def update(self, owner_id: str, record_id: str, patch: Mapping[str, Any]) -> Optional[T]:
        """Merge ``patch`` onto the record; None when there is nothing to update."""

    @abstractmethod
    def delete(self, owner_id: str, record_id: str) -> bool:
        """Remove the record. False when nothing matched."""


class StagePlotStore(ABC):
    """Stage plots are addressed by context id instead of a generated id."""

    @abstractmethod
    def list(self, owner_id: str) -> list[StagePlotSummary]:
        ...

    @abstractmethod
    def get(self, owner_id: str, context_id: str) -> StagePlot:
        """Return the stored plot or the synthesized empty one."""

    @abstractmethod
    def upsert(
        self,
        owner_id: str,
        context_id: str,
        nodes: Sequence[StageNode | Mapping[str, Any]],
        name: Optional[str] = UNSET,
    ) -> StagePlot:
        """Create the plot or replace its nodes. ``name`` only changes when given;
        an explicit None clears it."""

    @abstractmethod
    def delete(self, owner_id: str, context_id: str) -> bool:
        ...


class UserStore(ABC):
    @abstractmethod
    def get(self, owner_id: str) -> Optional[User]:
        ...

    @abstractmethod
    def ensure(self, owner_id: str, handle: Optional[str] = None) -> User:
        """Return the owner's user record, creating it on first use."""

    @abstractmethod
    def update(self, owner_id: str, patch: Mapping[str, Any]) -> Optional[User]:
        ...


class RecordStore(ABC):
    """One backend: a store per entity type."""

    name: str

    songs: EntityStore
    venues: EntityStore
    setlists: EntityStore
    shows: EntityStore
    stageplots: StagePlotStore
    users: UserStore

    @abstractmethod
    def reset_all(self) -> None:
        """Drop every record. Test isolation only."""
