from fastapi import APIRouter, Request

from .deps import get_repository

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz(request: Request):
    report = get_repository(request).health()
    return {
        "status": "ok",
        "db": report.connection_code,
        "state": report.connection_state,
        "last_error": report.last_error,
        "secure": report.secure,
        "memory": report.memory,
    }
