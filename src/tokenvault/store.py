"""Thread-safe credential store over a pluggable persistence engine.

Every operation opens its own persistence handle, then runs its whole
body (lookup, mutate, persist) under one store-wide lock. The lock is
released before the handle is closed, and both happen on every exit path.

The lock is per instance: two stores over the same engine do not
exclude each other, so share one CredentialStore per engine.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from tokenvault.credential import Credential
from tokenvault.persistence import HandleFactory, PersistenceHandle, lookup
from tokenvault.record import PersistedCredential

logger = logging.getLogger(__name__)


def _require_user_id(user_id: str) -> None:
    if not isinstance(user_id, str) or not user_id:
        raise ValueError("user_id must be a non-empty string.")


def _require_credential(credential: Credential) -> None:
    if credential is None:
        raise ValueError("credential must not be None.")


class CredentialStore:
    """Stores, loads and deletes OAuth2 credentials keyed by user id.

    - ``store()`` updates an existing record in place or inserts a new one.
    - ``load()`` returns False on a missing record (not exceptional).
    - ``delete()`` raises RecordNotFoundError on a missing record.
    - Backing-store failures propagate unchanged; nothing is retried.
    """

    def __init__(self, handle_factory: HandleFactory) -> None:
        if handle_factory is None:
            raise ValueError("A persistence handle factory is required.")
        self._handle_factory = handle_factory
        # Guards the full body of store/load/delete, across all keys.
        self._lock = threading.RLock()

    @contextmanager
    def _session(self) -> Iterator[PersistenceHandle]:
        """Open a handle, then hold the lock; release lock, then close handle."""
        handle = self._handle_factory.open_handle()
        try:
            with self._lock:
                yield handle
        finally:
            handle.close()

    def store(self, user_id: str, credential: Credential) -> None:
        """Persist the credential's current fields for ``user_id``."""
        _require_user_id(user_id)
        _require_credential(credential)
        with self._session() as handle:
            result = lookup(handle, user_id)
            result.raise_for_failure()
            if result.found:
                record = result.record
                record.update(credential)
                handle.update(record)
                logger.debug("Updated stored credential for %s.", user_id)
            else:
                handle.insert(PersistedCredential.from_credential(user_id, credential))
                logger.debug("Inserted new credential for %s.", user_id)

    def load(self, user_id: str, credential: Credential) -> bool:
        """Populate ``credential`` from storage.

        Returns True when a record was found. On a miss, returns False and
        leaves ``credential`` untouched.
        """
        _require_user_id(user_id)
        _require_credential(credential)
        with self._session() as handle:
            result = lookup(handle, user_id)
            result.raise_for_failure()
            if not result.found:
                return False
            result.record.load(credential)
            return True

    def delete(self, user_id: str, credential: Credential | None = None) -> None:
        """Remove the stored credential for ``user_id``.

        ``credential`` is accepted for symmetry with store/load and is not
        used to locate the record.

        Unlike ``load()``, a missing record is an error here: deleting a
        user id that was never stored raises RecordNotFoundError.
        """
        _require_user_id(user_id)
        with self._session() as handle:
            result = lookup(handle, user_id)
            if not result.found:
                raise result.error
            handle.delete(result.record)
            logger.debug("Deleted stored credential for %s.", user_id)
