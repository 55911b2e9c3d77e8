"""Durable backend: the same store contract on top of SQLAlchemy.

Identifiers come from the database (integer primary keys exposed as strings).
Each operation opens one session and commits once, so a multi-field update is
applied whole or not at all.
"""
from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from typing import Any, Callable, ContextManager, Mapping, Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gigbook.db.models import (
    SetlistModel,
    ShowModel,
    SongModel,
    StagePlotModel,
    UserModel,
    VenueModel,
)
from gigbook.db.session import get_session
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
    record_fields,
)
from gigbook.domain.records import NESTED_FIELDS

from .base import UNSET, EntityStore, RecordStore, StagePlotStore, UserStore, synthesize_stage_plot

SessionFactory = Callable[[], ContextManager[Session]]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_id(record_id: str) -> Optional[int]:
    """Database keys are integers; anything else can never match."""
    try:
        return int(str(record_id).strip())
    except (TypeError, ValueError):
        return None


def _to_columns(record_cls: type, values: Mapping[str, Any]) -> dict[str, Any]:
    nested = NESTED_FIELDS.get(record_cls, {})
    columns = dict(values)
    for key in nested:
        if key in columns:
            columns[key] = [dataclasses.asdict(item) for item in columns[key]]
    return columns


def _to_record(record_cls: type, row: Any) -> Any:
    values = coerce_patch(record_cls, {name: getattr(row, name) for name in record_fields(record_cls)})
    return record_cls(
        id=str(row.id),
        owner_id=row.owner_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
        **values,
    )


class SQLCollection(EntityStore):
    """One table, one record type."""

    def __init__(self, model: type, record_cls: type, session_factory: SessionFactory) -> None:
        self.model = model
        self.record_cls = record_cls
        self._session = session_factory

    def _find(self, session: Session, owner_id: str, record_id: str):
        pk = _parse_id(record_id)
        if pk is None:
            return None
        stmt = select(self.model).where(self.model.id == pk, self.model.owner_id == owner_id)
        return session.execute(stmt).scalar_one_or_none()

    def list(self, owner_id: str) -> list:
        with self._session() as session:
            stmt = select(self.model).where(self.model.owner_id == owner_id).order_by(self.model.id)
            return [_to_record(self.record_cls, row) for row in session.execute(stmt).scalars().all()]

    def get(self, owner_id: str, record_id: str):
        with self._session() as session:
            row = self._find(session, owner_id, record_id)
            return _to_record(self.record_cls, row) if row else None

    def create(self, owner_id: str, fields: Mapping[str, Any]):
        now = _now()
        columns = _to_columns(self.record_cls, coerce_patch(self.record_cls, fields))
        entity = self.model(owner_id=owner_id, created_at=now, updated_at=now, **columns)
        with self._session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return _to_record(self.record_cls, entity)

    def update(self, owner_id: str, record_id: str, patch: Mapping[str, Any]):
        columns = _to_columns(self.record_cls, coerce_patch(self.record_cls, patch))
        with self._session() as session:
            row = self._find(session, owner_id, record_id)
            if not row:
                return None
            for key, value in columns.items():
                setattr(row, key, value)
            row.updated_at = _now()
            session.commit()
            session.refresh(row)
            return _to_record(self.record_cls, row)

    def delete(self, owner_id: str, record_id: str) -> bool:
        pk = _parse_id(record_id)
        if pk is None:
            return False
        with self._session() as session:
            result = session.execute(
                delete(self.model).where(self.model.id == pk, self.model.owner_id == owner_id)
            )
            session.commit()
            return bool(result.rowcount)

    def clear(self) -> None:
        with self._session() as session:
            session.execute(delete(self.model))
            session.commit()


def _plot_from_row(row: StagePlotModel) -> StagePlot:
    return StagePlot(
        id=str(row.id),
        owner_id=row.owner_id,
        context_id=row.context_id,
        name=row.name,
        nodes=coerce_patch(StagePlot, {"nodes": row.nodes})["nodes"],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SQLStagePlots(StagePlotStore):
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session = session_factory

    @staticmethod
    def _find(session: Session, owner_id: str, context_id: str) -> Optional[StagePlotModel]:
        stmt = select(StagePlotModel).where(
            StagePlotModel.owner_id == owner_id,
            StagePlotModel.context_id == context_id,
        )
        return session.execute(stmt).scalar_one_or_none()

    def list(self, owner_id: str) -> list[StagePlotSummary]:
        # Projection only: node detail is fetched through get().
        with self._session() as session:
            stmt = (
                select(StagePlotModel.context_id, StagePlotModel.name)
                .where(StagePlotModel.owner_id == owner_id)
                .order_by(StagePlotModel.id)
            )
            return [StagePlotSummary(context_id=c, name=n) for c, n in session.execute(stmt).all()]

    def get(self, owner_id: str, context_id: str) -> StagePlot:
        with self._session() as session:
            row = self._find(session, owner_id, context_id)
            if row is None:
                return synthesize_stage_plot(owner_id, context_id)
            return _plot_from_row(row)

    def upsert(
        self,
        owner_id: str,
        context_id: str,
        nodes: Sequence[StageNode | Mapping[str, Any]],
        name: Optional[str] = UNSET,
    ) -> StagePlot:
        node_docs = [
            dataclasses.asdict(node)
            for node in coerce_patch(StagePlot, {"nodes": list(nodes or [])})["nodes"]
        ]
        try:
            return self._write(owner_id, context_id, node_docs, name)
        except IntegrityError:
            # A concurrent first save inserted the row; the retry takes the replace path.
            return self._write(owner_id, context_id, node_docs, name)

    def _write(self, owner_id: str, context_id: str, node_docs: list[dict], name: Optional[str]) -> StagePlot:
        now = _now()
        with self._session() as session:
            row = self._find(session, owner_id, context_id)
            if row is None:
                row = StagePlotModel(
                    owner_id=owner_id,
                    context_id=context_id,
                    name=None if name is UNSET else name,
                    nodes=node_docs,
                    created_at=now,
                    updated_at=now,
                )
                session.add(row)
            else:
                row.nodes = node_docs
                if name is not UNSET:
                    row.name = name
                row.updated_at = now
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise
            session.refresh(row)
            return _plot_from_row(row)

    def delete(self, owner_id: str, context_id: str) -> bool:
        with self._session() as session:
            result = session.execute(
                delete(StagePlotModel).where(
                    StagePlotModel.owner_id == owner_id,
                    StagePlotModel.context_id == context_id,
                )
            )
            session.commit()
            return bool(result.rowcount)

    def clear(self) -> None:
        with self._session() as session:
            session.execute(delete(StagePlotModel))
            session.commit()


def _user_from_row(row: UserModel) -> User:
    return User(
        owner_id=row.owner_id,
        handle=row.handle,
        preferences=dict(row.preferences or {}),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SQLUsers(UserStore):
    def __init__(self, session_factory: SessionFactory) -> None:
        self._session = session_factory

    @staticmethod
    def _find(session: Session, owner_id: str) -> Optional[UserModel]:
        stmt = select(UserModel).where(UserModel.owner_id == owner_id)
        return session.execute(stmt).scalar_one_or_none()

    def get(self, owner_id: str) -> Optional[User]:
        with self._session() as session:
            row = self._find(session, owner_id)
            return _user_from_row(row) if row else None

    def ensure(self, owner_id: str, handle: Optional[str] = None) -> User:
        now = _now()
        with self._session() as session:
            row = self._find(session, owner_id)
            if row is None:
                row = UserModel(owner_id=owner_id, handle=handle, preferences={}, created_at=now, updated_at=now)
                session.add(row)
                try:
                    session.commit()
                except IntegrityError:
                    session.rollback()
                    row = self._find(session, owner_id)
                    return _user_from_row(row)
                session.refresh(row)
            return _user_from_row(row)

    def update(self, owner_id: str, patch: Mapping[str, Any]) -> Optional[User]:
        values = coerce_patch(User, patch)
        with self._session() as session:
            row = self._find(session, owner_id)
            if not row:
                return None
            if "handle" in values:
                row.handle = values["handle"]
            if "preferences" in values:
                row.preferences = {**(row.preferences or {}), **(values["preferences"] or {})}
            row.updated_at = _now()
            session.commit()
            session.refresh(row)
            return _user_from_row(row)

    def clear(self) -> None:
        with self._session() as session:
            session.execute(delete(UserModel))
            session.commit()


class SQLRepository(RecordStore):
    """Durable backend wrapping the SQLAlchemy session."""

    name = "durable"

    def __init__(self, session_factory: SessionFactory = get_session) -> None:
        self.songs = SQLCollection(SongModel, Song, session_factory)
        self.venues = SQLCollection(VenueModel, Venue, session_factory)
        self.setlists = SQLCollection(SetlistModel, Setlist, session_factory)
        self.shows = SQLCollection(ShowModel, Show, session_factory)
        self.stageplots = SQLStagePlots(session_factory)
        self.users = SQLUsers(session_factory)

    def reset_all(self) -> None:
        for collection in (self.songs, self.venues, self.setlists, self.shows, self.stageplots, self.users):
            collection.clear()
