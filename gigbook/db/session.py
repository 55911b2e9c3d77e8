"""Engine/session helpers for the durable backend."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from gigbook.core.config import get_settings

Base = declarative_base()


def connect_args_for(url: str, timeout: float) -> dict:
    """Driver-level connect timeout so a dead server fails instead of hanging."""
    backend = make_url(url).get_backend_name()
    if backend == "sqlite":
        return {"timeout": timeout, "check_same_thread": False}
    if backend == "postgresql":
        return {"connect_timeout": int(timeout)}
    if backend in ("mysql", "mariadb"):
        return {"connect_timeout": int(timeout)}
    return {}


@lru_cache
def get_engine() -> Engine:
    settings = get_settings()
    url = (settings.database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured to use the durable backend.")
    return create_engine(
        url,
        future=True,
        pool_pre_ping=True,
        connect_args=connect_args_for(url, settings.db_connect_timeout),
    )


@lru_cache
def _get_sessionmaker():
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, future=True)


@contextmanager
def get_session() -> Session:
    session: Session = _get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()
