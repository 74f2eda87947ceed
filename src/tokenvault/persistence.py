"""Abstract persistence interface for credential records.

Defines the HandleFactory and PersistenceHandle Protocols that
CredentialStore depends on, the error hierarchy engines raise, and the
tagged ``lookup()`` that separates "not found" from genuine failures.
Concrete engines live in ``tokenvault.engines``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tokenvault.record import PersistedCredential


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------


class TokenVaultError(Exception):
    """Base exception for credential persistence."""


class RecordNotFoundError(TokenVaultError, KeyError):
    """No record is stored for the requested user id."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"No credential stored for user {user_id!r}.")
        self.user_id = user_id

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return str(self.args[0])


class BackingStoreError(TokenVaultError):
    """Any engine failure other than not-found (I/O, constraint, corrupt data)."""


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class PersistenceHandle(Protocol):
    """Short-lived session against a backing engine.

    Opened at the start of one store operation and closed on every exit
    path of that operation. Never shared across operations or threads.
    """

    def get_record(self, user_id: str) -> PersistedCredential: ...

    def insert(self, record: PersistedCredential) -> None: ...

    def update(self, record: PersistedCredential) -> None: ...

    def delete(self, record: PersistedCredential) -> None: ...

    def close(self) -> None: ...


@runtime_checkable
class HandleFactory(Protocol):
    """Anything able to open a fresh PersistenceHandle on demand."""

    def open_handle(self) -> PersistenceHandle: ...


# ---------------------------------------------------------------------------
# Tagged lookup
# ---------------------------------------------------------------------------


class LookupStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a keyed lookup: the record, or the error that replaced it."""

    status: LookupStatus
    record: PersistedCredential | None = None
    error: TokenVaultError | None = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND

    def raise_for_failure(self) -> None:
        """Re-raise a backing-store failure. Not-found is left to the caller."""
        if self.status is LookupStatus.FAILED and self.error is not None:
            raise self.error


def lookup(handle: PersistenceHandle, user_id: str) -> LookupResult:
    """Fetch the record for ``user_id`` without conflating absence and failure.

    Only TokenVaultError subclasses are captured; anything else an engine
    raises propagates unchanged.
    """
    try:
        record = handle.get_record(user_id)
    except RecordNotFoundError as exc:
        return LookupResult(LookupStatus.NOT_FOUND, error=exc)
    except BackingStoreError as exc:
        return LookupResult(LookupStatus.FAILED, error=exc)
    return LookupResult(LookupStatus.FOUND, record=record)
