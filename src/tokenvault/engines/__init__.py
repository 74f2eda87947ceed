"""Bundled persistence engines and config-driven engine selection."""

from __future__ import annotations

import logging

from tokenvault.cipher import TokenCipher
from tokenvault.config import TokenVaultConfig
from tokenvault.engines.memory import MemoryEngine, MemoryHandle
from tokenvault.engines.thebrain import TheBrainEngine, TheBrainHandle
from tokenvault.persistence import HandleFactory

logger = logging.getLogger(__name__)


def build_engine(config: TokenVaultConfig) -> HandleFactory:
    """Return the engine the config describes.

    All three TheBrain settings select TheBrainEngine; none selects the
    in-process MemoryEngine. A partial TheBrain configuration is rejected.
    """
    thebrain = {
        "thebrain_api_key": config.thebrain_api_key,
        "thebrain_brain_id": config.thebrain_brain_id,
        "thebrain_home_thought_id": config.thebrain_home_thought_id,
    }
    missing = [name for name, value in thebrain.items() if not value]
    if len(missing) == len(thebrain):
        logger.info("No TheBrain settings; using in-process credential engine.")
        return MemoryEngine()
    if missing:
        raise ValueError(f"Incomplete TheBrain configuration; missing {', '.join(missing)}.")

    cipher = None
    if config.token_encryption_secret:
        cipher = TokenCipher(secret=config.token_encryption_secret)
    else:
        logger.warning("TOKEN_ENCRYPTION_SECRET not set; credential notes are stored unencrypted.")
    return TheBrainEngine(
        config.thebrain_api_key,
        config.thebrain_brain_id,
        config.thebrain_home_thought_id,
        cipher=cipher,
        timeout=config.http_timeout_secs,
    )


__all__ = [
    "MemoryEngine",
    "MemoryHandle",
    "TheBrainEngine",
    "TheBrainHandle",
    "build_engine",
]
