from __future__ import annotations

from typing import Protocol


class CredentialVerifier(Protocol):
    """Port for salted slow hashing of passwords and refresh tokens."""

    def hash(self, raw: str) -> str: ...

    def verify(self, plaintext: str, stored_hash: str | None) -> bool:
        """Return ``True`` on match. Malformed hashes are a mismatch, never an error."""
        ...
