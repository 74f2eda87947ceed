"""tokenvault — thread-safe OAuth2 credential persistence.

Stores, loads and deletes per-user credentials through pluggable
persistence engines.
"""

__version__ = "0.1.0"

from tokenvault.cipher import TokenCipher
from tokenvault.config import TokenVaultConfig
from tokenvault.credential import Credential
from tokenvault.record import PersistedCredential
from tokenvault.persistence import (
    BackingStoreError,
    HandleFactory,
    LookupResult,
    LookupStatus,
    PersistenceHandle,
    RecordNotFoundError,
    TokenVaultError,
    lookup,
)
from tokenvault.store import CredentialStore
from tokenvault.listener import StoreRefreshListener
from tokenvault.engines import MemoryEngine, TheBrainEngine, build_engine

__all__ = [
    "BackingStoreError",
    "Credential",
    "CredentialStore",
    "HandleFactory",
    "LookupResult",
    "LookupStatus",
    "MemoryEngine",
    "PersistedCredential",
    "PersistenceHandle",
    "RecordNotFoundError",
    "StoreRefreshListener",
    "TheBrainEngine",
    "TokenCipher",
    "TokenVaultConfig",
    "TokenVaultError",
    "build_engine",
    "lookup",
]
