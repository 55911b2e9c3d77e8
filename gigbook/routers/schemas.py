"""Request payloads. Required names/titles are enforced here, not in the stores."""
from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    def sent_fields(self) -> dict[str, Any]:
        """Only what the caller actually sent, so updates stay partial."""
        return self.model_dump(exclude_unset=True)


def _unique(values: Optional[list[str]]) -> Optional[list[str]]:
    if values is None:
        return None
    seen: dict[str, None] = {}
    for value in values:
        if value:
            seen.setdefault(value, None)
    return list(seen)


class SongIn(Payload):
    title: str = Field(min_length=1)
    bpm: Optional[float] = Field(default=None, ge=0)
    key: Optional[str] = None
    lyrics: Optional[str] = None
    streaming_links: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        return _unique(value)


class SongPatch(SongIn):
    title: Optional[str] = Field(default=None, min_length=1)
    streaming_links: Optional[list[str]] = None
    tags: Optional[list[str]] = None


class VenueIn(Payload):
    name: str = Field(min_length=1)
    address: Optional[str] = None
    contacts: list[str] = Field(default_factory=list)
    stage_dimensions: Optional[str] = None
    stage_width: Optional[float] = Field(default=None, ge=0)
    stage_height: Optional[float] = Field(default=None, ge=0)
    electrical: Optional[str] = None
    lighting: Optional[str] = None
    audio: Optional[str] = None
    hours: Optional[str] = None


class VenuePatch(VenueIn):
    name: Optional[str] = Field(default=None, min_length=1)
    contacts: Optional[list[str]] = None


class SetlistItemIn(Payload):
    song_id: Optional[str] = None
    notes: Optional[str] = None
    mood_tags: list[str] = Field(default_factory=list)


class SetlistIn(Payload):
    name: str = Field(min_length=1)
    items: list[SetlistItemIn] = Field(default_factory=list)


class SetlistPatch(SetlistIn):
    name: Optional[str] = Field(default=None, min_length=1)
    items: Optional[list[SetlistItemIn]] = None


class ShowIn(Payload):
    name: str = Field(min_length=1)
    date: Optional[dt.date] = None
    venue_id: Optional[str] = None
    setlist_id: Optional[str] = None
    setlist_ids: list[str] = Field(default_factory=list)
    arrive_at: Optional[str] = None
    setup_at: Optional[str] = None
    parking: Optional[str] = None
    food: Optional[str] = None
    technical_notes: Optional[str] = None


class ShowPatch(ShowIn):
    name: Optional[str] = Field(default=None, min_length=1)
    setlist_ids: Optional[list[str]] = None


class StageNodeIn(Payload):
    id: str = Field(min_length=1)
    label: str = ""
    x: float = 0
    y: float = 0
    type: Optional[str] = None
    color: Optional[str] = None


class StagePlotIn(Payload):
    nodes: list[StageNodeIn] = Field(default_factory=list)
    name: Optional[str] = None
