"""Durable credential record keyed by user id.

Pure data model — no I/O. Engines persist the JSON form; the store copies
fields between records and caller-owned Credential objects.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from tokenvault.credential import Credential
from tokenvault.persistence import BackingStoreError

_SCHEMA_VERSION = 1


@dataclass
class PersistedCredential:
    """Stored token state for one user. One record per ``user_id``."""

    user_id: str
    access_token: str | None = None
    refresh_token: str | None = None
    expiration_time_ms: int | None = None

    @classmethod
    def from_credential(cls, user_id: str, credential: Credential) -> PersistedCredential:
        record = cls(user_id=user_id)
        record.update(credential)
        return record

    def update(self, credential: Credential) -> None:
        """Copy the credential's fields into this record in place."""
        self.access_token = credential.access_token
        self.refresh_token = credential.refresh_token
        self.expiration_time_ms = credential.expiration_time_ms

    def load(self, credential: Credential) -> None:
        """Copy this record's fields into the caller's credential."""
        credential.access_token = self.access_token
        credential.refresh_token = self.refresh_token
        credential.expiration_time_ms = self.expiration_time_ms

    # -- serialization ---------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "v": _SCHEMA_VERSION,
            "user_id": self.user_id,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expiration_time_ms": self.expiration_time_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PersistedCredential:
        user_id = data.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            raise BackingStoreError("Credential record is missing its user_id.")
        expiration = data.get("expiration_time_ms")
        return cls(
            user_id=user_id,
            access_token=data.get("access_token"),
            refresh_token=data.get("refresh_token"),
            expiration_time_ms=int(expiration) if expiration is not None else None,
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw: str) -> PersistedCredential:
        """Parse a stored record.

        Unlike a missing record, a corrupt one is a backing-store failure.
        """
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as exc:
            raise BackingStoreError("Corrupt credential record.") from exc
        if not isinstance(data, dict):
            raise BackingStoreError("Corrupt credential record.")
        try:
            return cls.from_dict(data)
        except (TypeError, ValueError) as exc:
            raise BackingStoreError("Corrupt credential record.") from exc
