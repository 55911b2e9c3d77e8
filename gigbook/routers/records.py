"""CRUD routes for songs, venues, setlists and shows.

All four entity types share the same shape, so one factory builds each router.
"""

from typing import Type

from fastapi import APIRouter, HTTPException, Request, Response

from .deps import current_owner, get_repository, to_json
from .schemas import (
    SetlistIn,
    SetlistPatch,
    ShowIn,
    ShowPatch,
    SongIn,
    SongPatch,
    VenueIn,
    VenuePatch,
    Payload,
)


def build_router(entity: str, create_model: Type[Payload], patch_model: Type[Payload]) -> APIRouter:
    router = APIRouter(prefix=f"/api/{entity}", tags=[entity])

    def _repo(request: Request):
        return getattr(get_repository(request), entity)

    @router.get("")
    def list_records(request: Request):
        return to_json(_repo(request).list(current_owner(request)))

    @router.post("", status_code=201)
    def create_record(request: Request, payload: create_model):  # type: ignore[valid-type]
        return to_json(_repo(request).create(current_owner(request), payload.sent_fields()))

    @router.get("/{record_id}")
    def get_record(record_id: str, request: Request):
        item = _repo(request).get(current_owner(request), record_id)
        if item is None:
            raise HTTPException(404, "Not Found")
        return to_json(item)

    @router.put("/{record_id}")
    def update_record(record_id: str, request: Request, payload: patch_model):  # type: ignore[valid-type]
        updated = _repo(request).update(current_owner(request), record_id, payload.sent_fields())
        if updated is None:
            raise HTTPException(404, "Not Found")
        return to_json(updated)

    @router.delete("/{record_id}", status_code=204)
    def delete_record(record_id: str, request: Request):
        if not _repo(request).delete(current_owner(request), record_id):
            raise HTTPException(404, "Not Found")
        return Response(status_code=204)

    return router


songs_router = build_router("songs", SongIn, SongPatch)
venues_router = build_router("venues", VenueIn, VenuePatch)
setlists_router = build_router("setlists", SetlistIn, SetlistPatch)
shows_router = build_router("shows", ShowIn, ShowPatch)
