"""Symmetric encryption for credential notes held by remote engines."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from tokenvault.persistence import BackingStoreError


class TokenCipher:
    """Encrypt and decrypt strings with a Fernet key derived from a secret."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a stored note.

        A note that fails authentication (wrong secret, tampering) is
        reported as a backing-store failure.
        """
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise BackingStoreError(
                "Failed to decrypt credential note; wrong secret or tampered data."
            ) from exc
        return plaintext.decode("utf-8")
