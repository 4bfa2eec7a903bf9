"""
ticketing.services._shared.ports
================================

Collection of *ports* (hexagonal interfaces) that define the contracts for
credential hashing, access-token signing and refresh-token storage.

Modules
-------
- :mod:`credential_verifier`:
    Defines :class:`~.CredentialVerifier`, the salted slow hash contract.

- :mod:`access_token_codec`:
    Defines :class:`~.AccessTokenCodec` and the :class:`~.StubAccessTokenCodec`
    test double.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore`, :class:`~.RefreshTokenView`,
    :class:`~.IssuedRefreshToken` and :class:`~.InMemoryRefreshTokenStore`.

Concrete adapters (Flask-JWT-Extended, SQLAlchemy) live under
``ticketing.infra``.
"""

from __future__ import annotations

from .access_token_codec import AccessTokenCodec, StubAccessTokenCodec
from .credential_verifier import CredentialVerifier
from .refresh_token_store import (
    TOKEN_BYTES,
    InMemoryRefreshTokenStore,
    IssuedRefreshToken,
    RefreshTokenStore,
    RefreshTokenView,
    new_raw_token,
)

__all__ = [
    "AccessTokenCodec",
    "StubAccessTokenCodec",
    "CredentialVerifier",
    "RefreshTokenStore",
    "RefreshTokenView",
    "IssuedRefreshToken",
    "InMemoryRefreshTokenStore",
    "new_raw_token",
    "TOKEN_BYTES",
]
