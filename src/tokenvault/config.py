"""tokenvault configuration — plain frozen dataclass, no pydantic.

The host application constructs this from its own settings (env vars,
pydantic-settings, etc.) and passes it to ``build_engine()``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class TokenVaultConfig:
    thebrain_api_key: str | None = None
    thebrain_brain_id: str | None = None
    thebrain_home_thought_id: str | None = None
    token_encryption_secret: str | None = None
    http_timeout_secs: float = 30.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> TokenVaultConfig:
        """Read settings from environment variables; blanks count as unset."""
        env = os.environ if environ is None else environ

        def _get(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        timeout = _get("TOKENVAULT_HTTP_TIMEOUT")
        return cls(
            thebrain_api_key=_get("TOKENVAULT_THEBRAIN_API_KEY"),
            thebrain_brain_id=_get("TOKENVAULT_THEBRAIN_BRAIN_ID"),
            thebrain_home_thought_id=_get("TOKENVAULT_THEBRAIN_HOME_THOUGHT_ID"),
            token_encryption_secret=_get("TOKEN_ENCRYPTION_SECRET"),
            http_timeout_secs=float(timeout) if timeout else 30.0,
        )
