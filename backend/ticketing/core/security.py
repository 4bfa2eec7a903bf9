"""Salted slow hashing for passwords and refresh tokens.

Both credential kinds go through werkzeug's ``generate_password_hash`` so
the work factor is configured in one place (``PASSWORD_HASH_METHOD``). The
unsalted ``fingerprint`` is only a lookup discriminator for refresh tokens
and is never used to authenticate anything on its own.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from flask import current_app, has_app_context
from werkzeug.security import check_password_hash, generate_password_hash

DEFAULT_HASH_METHOD = "scrypt"


def _configured_method() -> str:
    if has_app_context():
        return str(current_app.config.get("PASSWORD_HASH_METHOD", DEFAULT_HASH_METHOD))
    return DEFAULT_HASH_METHOD


def hash_secret(raw: str, *, method: str | None = None) -> str:
    """
    Hash a secret with a per-value random salt.

    :param raw: Plain text secret (password or raw refresh token).
    :type raw: str
    :param method: Werkzeug hash method; defaults to ``PASSWORD_HASH_METHOD``.
    :type method: str | None
    :returns: Encoded ``method$salt$hash`` string.
    :rtype: str
    :raises ValueError: If ``raw`` is empty.
    """
    if not isinstance(raw, str) or not raw:
        raise ValueError("Secret must be a non-empty string.")
    return generate_password_hash(raw, method=method or _configured_method())


def verify_secret(raw: str, stored_hash: str | None) -> bool:
    """
    Compare a plain text secret with a stored salted hash.

    Never raises for bad input: empty, malformed or unknown-method hashes are
    simply a mismatch.

    :param raw: Candidate secret.
    :type raw: str
    :param stored_hash: Hash produced by :func:`hash_secret`.
    :type stored_hash: str | None
    :returns: ``True`` on match; otherwise ``False``.
    :rtype: bool
    """
    if not raw or not stored_hash:
        return False
    try:
        return bool(check_password_hash(stored_hash, raw))
    except (ValueError, TypeError):
        return False


def fingerprint(raw: str) -> str:
    """Return the unsalted SHA-256 hex digest of ``raw``."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class WerkzeugCredentialVerifier:
    """
    Credential verifier backed by werkzeug's salted hashes.

    :param method: Fixed hash method. ``None`` follows the app configuration.
    :type method: str | None
    """

    method: str | None = None

    def hash(self, raw: str) -> str:
        return hash_secret(raw, method=self.method)

    def verify(self, plaintext: str, stored_hash: str | None) -> bool:
        return verify_secret(plaintext, stored_hash)
