"""Shared fixtures: a temporary SQLite database and a store per backend."""
from __future__ import annotations

import dataclasses
import sys
from pathlib import Path

import pytest

# Make the gigbook package importable when running from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from gigbook.core import config as core_config  # noqa: E402
from gigbook.db import models  # noqa: E402
from gigbook.db import session as db_session  # noqa: E402
from gigbook.repositories import MemoryStore, SQLRepository  # noqa: E402


def _clear_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Point DATABASE_URL at a fresh SQLite file and tear it down afterwards."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("LOG_FILE", "")
    _clear_caches()

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield engine

    try:
        models.Base.metadata.drop_all(bind=engine)
    except Exception:
        pass
    try:
        engine.dispose()
    except Exception:
        pass
    _clear_caches()


@pytest.fixture(params=["volatile", "durable"])
def store(request):
    """Each contract test runs once against every backend."""
    if request.param == "volatile":
        memory = MemoryStore()
        yield memory
        memory.reset_all()
    else:
        request.getfixturevalue("temp_db")
        yield SQLRepository()


@pytest.fixture()
def settings(monkeypatch):
    monkeypatch.setenv("LOG_FILE", "")
    core_config.get_settings.cache_clear()
    yield dataclasses.replace(core_config.get_settings(), log_file="", default_owner="user1")
    core_config.get_settings.cache_clear()
