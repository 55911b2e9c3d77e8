"""Record types shared by every storage backend."""

from .records import (
    Setlist,
    SetlistItem,
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

__all__ = [
    "Setlist",
    "SetlistItem",
    "Show",
    "Song",
    "StageNode",
    "StagePlot",
    "StagePlotSummary",
    "User",
    "Venue",
    "coerce_patch",
    "record_fields",
]
