from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response

from gigbook.repositories.base import UNSET

from .deps import current_owner, get_repository, to_json
from .schemas import StagePlotIn

router = APIRouter(prefix="/api/stageplots", tags=["stageplots"])


@router.get("")
def list_stageplots(request: Request):
    return to_json(get_repository(request).stageplots.list(current_owner(request)))


@router.get("/{context_id}")
def get_stageplot(context_id: str, request: Request):
    # A missing plot comes back as an empty canvas, not a 404.
    return to_json(get_repository(request).stageplots.get(current_owner(request), context_id))


@router.post("/{context_id}")
def save_stageplot(context_id: str, payload: StagePlotIn, request: Request):
    sent = payload.sent_fields()
    # An omitted name keeps the stored one; an explicit null clears it.
    plot = get_repository(request).stageplots.upsert(
        current_owner(request),
        context_id,
        sent.get("nodes") or [],
        sent.get("name", UNSET),
    )
    return to_json(plot)


@router.delete("/{context_id}", status_code=204)
def delete_stageplot(context_id: str, request: Request):
    if not get_repository(request).stageplots.delete(current_owner(request), context_id):
        raise HTTPException(404, "Not Found")
    return Response(status_code=204)
