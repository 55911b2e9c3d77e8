"""The facade forwards to whichever store the selector currently exposes."""
from __future__ import annotations

import threading

from gigbook.repositories import Backend, BackendSelector, MemoryStore, Repository


def test_facade_follows_the_selected_store():
    gate = threading.Event()

    def refuse_when_released() -> None:
        gate.wait()
        raise ConnectionError("gone")

    durable, volatile = MemoryStore(), MemoryStore()
    selector = BackendSelector(durable, volatile, probe=refuse_when_released)
    repo = Repository(selector)

    selector.start()
    before = repo.songs.create("user1", {"title": "Angie"})
    gate.set()
    assert selector.connect() is Backend.VOLATILE
    after = repo.songs.create("user1", {"title": "Wild Horses"})

    assert durable.songs.list("user1") == [before]
    assert volatile.songs.list("user1") == [after]
    assert repo.songs.list("user1") == [after]
    assert repo.health().memory is True


def test_facade_returns_backend_results_unchanged():
    selector = BackendSelector(MemoryStore(), MemoryStore(), probe=lambda: None)
    repo = Repository(selector)

    assert repo.songs.get("user1", "missing") is None
    assert repo.venues.delete("user1", "missing") is False
    assert repo.stageplots.get("user1", "ctx").nodes == []
    assert repo.users.get("user1") is None
    assert repo.users.ensure("user1", "Demo User").handle == "Demo User"
