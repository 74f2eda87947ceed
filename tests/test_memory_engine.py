"""Tests for MemoryEngine: copy semantics, key constraints, handle accounting."""

import pytest

from tokenvault.engines.memory import MemoryEngine
from tokenvault.persistence import BackingStoreError, RecordNotFoundError
from tokenvault.record import PersistedCredential


def _record(user_id: str = "user1", token: str = "a") -> PersistedCredential:
    return PersistedCredential(user_id, access_token=token, refresh_token="r")


class TestMemoryHandle:
    def test_get_missing_raises_not_found(self) -> None:
        handle = MemoryEngine().open_handle()
        with pytest.raises(RecordNotFoundError):
            handle.get_record("user1")

    def test_insert_then_get(self) -> None:
        handle = MemoryEngine().open_handle()
        handle.insert(_record())
        assert handle.get_record("user1") == _record()

    def test_get_returns_copy(self) -> None:
        engine = MemoryEngine()
        handle = engine.open_handle()
        handle.insert(_record())
        fetched = handle.get_record("user1")
        fetched.access_token = "edited"
        assert engine.open_handle().get_record("user1").access_token == "a"

    def test_update_writes_back(self) -> None:
        engine = MemoryEngine()
        handle = engine.open_handle()
        handle.insert(_record())
        fetched = handle.get_record("user1")
        fetched.access_token = "edited"
        handle.update(fetched)
        assert engine.open_handle().get_record("user1").access_token == "edited"

    def test_duplicate_insert_is_backing_store_error(self) -> None:
        handle = MemoryEngine().open_handle()
        handle.insert(_record())
        with pytest.raises(BackingStoreError, match="Duplicate key"):
            handle.insert(_record(token="b"))

    def test_update_missing_raises_not_found(self) -> None:
        handle = MemoryEngine().open_handle()
        with pytest.raises(RecordNotFoundError):
            handle.update(_record())

    def test_delete(self) -> None:
        engine = MemoryEngine()
        handle = engine.open_handle()
        handle.insert(_record())
        handle.delete(_record())
        assert engine.size == 0
        with pytest.raises(RecordNotFoundError):
            handle.delete(_record())

    def test_closed_handle_rejects_calls(self) -> None:
        handle = MemoryEngine().open_handle()
        handle.close()
        assert handle.closed
        with pytest.raises(BackingStoreError, match="closed"):
            handle.get_record("user1")
        with pytest.raises(BackingStoreError):
            handle.insert(_record())


class TestMemoryEngineAccounting:
    def test_counts_open_and_close(self) -> None:
        engine = MemoryEngine()
        h1 = engine.open_handle()
        h2 = engine.open_handle()
        assert engine.open_handles == 2
        h1.close()
        h1.close()  # second close is a no-op
        assert engine.closed_handles == 1
        h2.close()
        assert engine.opened_handles == 2
        assert engine.open_handles == 0

    def test_health(self) -> None:
        engine = MemoryEngine()
        handle = engine.open_handle()
        handle.insert(_record())
        assert engine.health() == {
            "records": 1,
            "opened_handles": 1,
            "closed_handles": 0,
            "open_handles": 1,
        }
