"""Request-scoped accessors for objects configured on ``app.state``."""
from __future__ import annotations

import dataclasses
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder

from gigbook.repositories import Repository


def get_repository(request: Request) -> Repository:
    repo = getattr(getattr(request.app, "state", None), "repository", None)
    if not repo:
        raise RuntimeError("Repository not configured")
    return repo


def current_owner(request: Request) -> str:
    """Single implicit tenant until accounts exist."""
    return getattr(request.app.state, "owner_id", None) or "user1"


def to_json(record: Any) -> Any:
    if isinstance(record, list):
        return [to_json(item) for item in record]
    if dataclasses.is_dataclass(record):
        return jsonable_encoder(dataclasses.asdict(record))
    return jsonable_encoder(record)
