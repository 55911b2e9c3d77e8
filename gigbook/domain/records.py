"""
Entity records for songs, venues, setlists, shows, stage plots and users.

Both backends hand out these exact types, so a caller cannot tell from the
shape of a record which store produced it. Optional attributes are ``None``
when unset; list attributes default to empty lists.
"""
from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields, is_dataclass
import datetime as dt
from typing import Any, Mapping, Optional

# Managed by the store, never taken from caller input.
MANAGED_FIELDS = frozenset({"id", "owner_id", "created_at", "updated_at"})


@dataclass
class Song:
    id: str
    owner_id: str
    title: str = ""
    bpm: Optional[float] = None
    key: Optional[str] = None
    lyrics: Optional[str] = None
    streaming_links: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


@dataclass
class Venue:
    id: str
    owner_id: str
    name: str = ""
    address: Optional[str] = None
    contacts: list[str] = field(default_factory=list)
    stage_dimensions: Optional[str] = None
    stage_width: Optional[float] = None
    stage_height: Optional[float] = None
    electrical: Optional[str] = None
    lighting: Optional[str] = None
    audio: Optional[str] = None
    hours: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


@dataclass
class SetlistItem:
    """One slot of a setlist. ``song_id`` is a weak reference and may dangle."""

    song_id: Optional[str] = None
    notes: Optional[str] = None
    mood_tags: list[str] = field(default_factory=list)


@dataclass
class Setlist:
    id: str
    owner_id: str
    name: str = ""
    items: list[SetlistItem] = field(default_factory=list)
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


@dataclass
class Show:
    id: str
    owner_id: str
    name: str = ""
    date: Optional[dt.date] = None
    venue_id: Optional[str] = None
    setlist_id: Optional[str] = None
    setlist_ids: list[str] = field(default_factory=list)
    arrive_at: Optional[str] = None
    setup_at: Optional[str] = None
    parking: Optional[str] = None
    food: Optional[str] = None
    technical_notes: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


@dataclass
class StageNode:
    id: str
    label: str = ""
    x: float = 0
    y: float = 0
    type: Optional[str] = None
    color: Optional[str] = None


@dataclass
class StagePlot:
    """Stage layout keyed by ``(owner_id, context_id)``.

    ``id`` is ``None`` for the synthesized empty plot returned on a read miss.
    """

    owner_id: str
    context_id: str
    name: Optional[str] = None
    nodes: list[StageNode] = field(default_factory=list)
    id: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


@dataclass
class StagePlotSummary:
    """List projection of a stage plot (no node detail)."""

    context_id: str
    name: Optional[str] = None


@dataclass
class User:
    owner_id: str
    handle: Optional[str] = None
    preferences: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


NESTED_FIELDS: dict[type, dict[str, type]] = {
    Setlist: {"items": SetlistItem},
    StagePlot: {"nodes": StageNode},
}


def record_fields(cls: type) -> tuple[str, ...]:
    """Names of the caller-writable attributes of a record type."""
    return tuple(f.name for f in fields(cls) if f.name not in MANAGED_FIELDS)


def _build(item_cls: type, value: Any) -> Any:
    if isinstance(value, item_cls):
        return value
    if is_dataclass(value):
        value = {f.name: getattr(value, f.name) for f in fields(value)}
    known = {f.name for f in fields(item_cls)}
    return item_cls(**{k: v for k, v in dict(value).items() if k in known})


def coerce_patch(cls: type, data: Mapping[str, Any]) -> dict[str, Any]:
    """Keep only writable keys of ``cls`` and build nested records from dicts.

    Unknown keys are dropped, the way a strict document schema ignores paths
    it does not declare. ``None`` for a list or mapping attribute becomes empty.
    """
    allowed = set(record_fields(cls))
    nested = NESTED_FIELDS.get(cls, {})
    defaults = {f.name: f.default_factory for f in fields(cls) if f.default_factory is not MISSING}
    patch: dict[str, Any] = {}
    for key, value in data.items():
        if key not in allowed:
            continue
        if value is None and key in defaults:
            value = defaults[key]()
        if key in nested:
            value = [_build(nested[key], item) for item in value]
        patch[key] = value
    return patch
