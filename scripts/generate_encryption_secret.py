#!/usr/bin/env python3
"""Generate a secret for encrypting stored credential notes.

Outputs a random Fernet key suitable for TOKEN_ENCRYPTION_SECRET:

  - Set it in the .env of every process sharing one credential vault
  - Rotating it makes existing notes unreadable; re-store credentials after

Requires: pip install cryptography
"""

from __future__ import annotations

from cryptography.fernet import Fernet


def main() -> None:
    secret = Fernet.generate_key().decode("ascii")

    print("=== Credential Encryption Secret ===")
    print()
    print("Secret (back up securely, never commit to git):")
    print(f"  {secret}")
    print()
    print("--- Environment variable usage ---")
    print()
    print(f"  TOKEN_ENCRYPTION_SECRET={secret}")


if __name__ == "__main__":
    main()
