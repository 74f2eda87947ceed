"""OAuth2 credential value object.

Pure data model — no I/O. Owned by the caller; the credential store only
reads from it on ``store()`` and writes into it on ``load()``.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Credential:
    """Access/refresh token pair with an absolute expiry.

    ``expiration_time_ms`` is epoch milliseconds (UTC), or None when the
    authorization server did not report a lifetime.
    """

    access_token: str | None = None
    refresh_token: str | None = None
    expiration_time_ms: int | None = None

    def expires_in_seconds(self, now_ms: int | None = None) -> int | None:
        """Seconds until expiry (negative once expired), None if unknown."""
        if self.expiration_time_ms is None:
            return None
        if now_ms is None:
            now_ms = _now_ms()
        return (self.expiration_time_ms - now_ms) // 1000

    def is_expired(self, now_ms: int | None = None, *, skew_secs: int = 0) -> bool:
        if self.expiration_time_ms is None:
            return False
        if now_ms is None:
            now_ms = _now_ms()
        return self.expiration_time_ms - now_ms <= skew_secs * 1000

    def set_from_token_response(
        self, response: Mapping[str, Any], now_ms: int | None = None,
    ) -> None:
        """Apply a token endpoint response to this credential.

        Refresh grants often omit ``refresh_token``; the current one is kept
        in that case.
        """
        self.access_token = response.get("access_token")
        refresh_token = response.get("refresh_token")
        if refresh_token is not None:
            self.refresh_token = refresh_token
        expires_in = response.get("expires_in")
        if expires_in is None:
            self.expiration_time_ms = None
        else:
            if now_ms is None:
                now_ms = _now_ms()
            self.expiration_time_ms = now_ms + int(expires_in) * 1000
