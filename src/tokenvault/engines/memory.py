"""In-process persistence engine backed by a dict of JSON records.

Useful for tests and single-process deployments. Handles hand out copies
of stored records, so in-place edits are invisible to other handles until
written back with ``update()``.
"""

from __future__ import annotations

import threading

from tokenvault.persistence import BackingStoreError, RecordNotFoundError
from tokenvault.record import PersistedCredential


class MemoryHandle:
    """One session against a MemoryEngine. Implements ``PersistenceHandle``."""

    def __init__(self, engine: MemoryEngine) -> None:
        self._engine = engine
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise BackingStoreError("Persistence handle is closed.")

    def get_record(self, user_id: str) -> PersistedCredential:
        self._check_open()
        raw = self._engine._read(user_id)
        if raw is None:
            raise RecordNotFoundError(user_id)
        return PersistedCredential.from_json(raw)

    def insert(self, record: PersistedCredential) -> None:
        self._check_open()
        self._engine._write(record, create=True)

    def update(self, record: PersistedCredential) -> None:
        self._check_open()
        self._engine._write(record, create=False)

    def delete(self, record: PersistedCredential) -> None:
        self._check_open()
        self._engine._remove(record.user_id)

    def close(self) -> None:
        """Release the handle. Closing twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        self._engine._handle_closed()

    @property
    def closed(self) -> bool:
        return self._closed


class MemoryEngine:
    """Thread-safe dict engine. Implements ``HandleFactory``.

    Keeps counts of opened and closed handles so callers can verify that
    every session was released.
    """

    def __init__(self) -> None:
        self._records: dict[str, str] = {}
        self._lock = threading.Lock()
        self._opened_handles = 0
        self._closed_handles = 0

    def open_handle(self) -> MemoryHandle:
        with self._lock:
            self._opened_handles += 1
        return MemoryHandle(self)

    # -- called by handles ---------------------------------------------------

    def _read(self, user_id: str) -> str | None:
        with self._lock:
            return self._records.get(user_id)

    def _write(self, record: PersistedCredential, *, create: bool) -> None:
        raw = record.to_json()
        with self._lock:
            exists = record.user_id in self._records
            if create and exists:
                raise BackingStoreError(
                    f"Duplicate key: a credential for {record.user_id!r} already exists."
                )
            if not create and not exists:
                raise RecordNotFoundError(record.user_id)
            self._records[record.user_id] = raw

    def _remove(self, user_id: str) -> None:
        with self._lock:
            if self._records.pop(user_id, None) is None:
                raise RecordNotFoundError(user_id)

    def _handle_closed(self) -> None:
        with self._lock:
            self._closed_handles += 1

    # -- introspection -------------------------------------------------------

    @property
    def size(self) -> int:
        """Number of stored records."""
        with self._lock:
            return len(self._records)

    @property
    def opened_handles(self) -> int:
        return self._opened_handles

    @property
    def closed_handles(self) -> int:
        return self._closed_handles

    @property
    def open_handles(self) -> int:
        """Handles opened but not yet closed."""
        with self._lock:
            return self._opened_handles - self._closed_handles

    def health(self) -> dict[str, object]:
        """Return engine health metrics for monitoring."""
        with self._lock:
            open_count = self._opened_handles - self._closed_handles
            return {
                "records": len(self._records),
                "opened_handles": self._opened_handles,
                "closed_handles": self._closed_handles,
                "open_handles": open_count,
            }
