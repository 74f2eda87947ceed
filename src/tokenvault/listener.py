"""Persist credentials after token refreshes."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from tokenvault.credential import Credential
from tokenvault.store import CredentialStore

logger = logging.getLogger(__name__)


class StoreRefreshListener:
    """Refresh callback that writes the credential back to a CredentialStore.

    Hook ``on_token_response`` / ``on_token_error_response`` into whatever
    performs the refresh grant for ``user_id``.
    """

    def __init__(self, user_id: str, store: CredentialStore) -> None:
        if not user_id:
            raise ValueError("user_id must be a non-empty string.")
        if store is None:
            raise ValueError("A credential store is required.")
        self._user_id = user_id
        self._store = store

    @property
    def user_id(self) -> str:
        return self._user_id

    def on_token_response(
        self, credential: Credential, response: Mapping[str, Any] | None = None,
    ) -> None:
        """Apply a successful token response (if given) and persist."""
        if response is not None:
            credential.set_from_token_response(response)
        self._store.store(self._user_id, credential)

    def on_token_error_response(
        self, credential: Credential, error: Mapping[str, Any] | None = None,
    ) -> None:
        """Persist the credential as it stands after a failed refresh.

        The refresh client usually clears the tokens on an error response;
        writing that state back keeps a revoked token from being reloaded.
        """
        logger.warning(
            "Token refresh failed for %s: %s",
            self._user_id, (error or {}).get("error", "unknown error"),
        )
        self._store.store(self._user_id, credential)
