"""Tests for StoreRefreshListener."""

import pytest

from tokenvault.credential import Credential
from tokenvault.engines.memory import MemoryEngine
from tokenvault.listener import StoreRefreshListener
from tokenvault.store import CredentialStore


def _listener() -> tuple[StoreRefreshListener, CredentialStore]:
    store = CredentialStore(MemoryEngine())
    return StoreRefreshListener("user1", store), store


class TestStoreRefreshListener:
    def test_requires_user_id(self) -> None:
        with pytest.raises(ValueError):
            StoreRefreshListener("", CredentialStore(MemoryEngine()))

    def test_requires_store(self) -> None:
        with pytest.raises(ValueError):
            StoreRefreshListener("user1", None)

    def test_token_response_applied_and_persisted(self) -> None:
        listener, store = _listener()
        cred = Credential(access_token="old", refresh_token="r1")
        listener.on_token_response(cred, {"access_token": "new", "expires_in": 3600})
        assert cred.access_token == "new"

        loaded = Credential()
        assert store.load("user1", loaded) is True
        assert loaded.access_token == "new"
        assert loaded.refresh_token == "r1"
        assert loaded.expiration_time_ms is not None

    def test_token_response_without_body_persists_as_is(self) -> None:
        listener, store = _listener()
        listener.on_token_response(Credential(access_token="a"))
        loaded = Credential()
        store.load("user1", loaded)
        assert loaded.access_token == "a"

    def test_error_response_persists_cleared_state(self, caplog) -> None:
        listener, store = _listener()
        store.store("user1", Credential(access_token="a", refresh_token="r"))
        cleared = Credential()
        with caplog.at_level("WARNING"):
            listener.on_token_error_response(cleared, {"error": "invalid_grant"})
        assert "invalid_grant" in caplog.text

        loaded = Credential(access_token="stale")
        assert store.load("user1", loaded) is True
        assert loaded == Credential()
