from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import Protocol

from ticketing.services._shared.errors import InvalidTokenError
from ticketing.services.auth.dto import AccessTokenClaims


class AccessTokenCodec(Protocol):
    """Port for signing and verifying stateless access tokens."""

    def sign(self, claims: AccessTokenClaims) -> str: ...

    def verify(self, token: str) -> AccessTokenClaims:
        """Decode ``token`` or raise :class:`InvalidTokenError`."""
        ...


class StubAccessTokenCodec(AccessTokenCodec):
    """Deterministic, app-context-free codec used in unit tests.

    Tokens are ``stub.<seq>`` handles into an internal table; anything not
    issued here, or issued with a lifetime that has elapsed, fails to verify.
    """

    def __init__(self, *, expires: timedelta | None = timedelta(minutes=15)) -> None:
        self.expires = expires
        self._seq = 0
        self._issued: dict[str, str] = {}

    def sign(self, claims: AccessTokenClaims) -> str:
        now = datetime.now(UTC)
        self._seq += 1
        token = f"stub.{self._seq}"
        payload = {
            "sub": claims.sub,
            "email": claims.email,
            "role": claims.role,
            "iat": now.timestamp(),
            "exp": (now + self.expires).timestamp() if self.expires else None,
        }
        self._issued[token] = json.dumps(payload)
        return token

    def verify(self, token: str) -> AccessTokenClaims:
        raw = self._issued.get(token)
        if raw is None:
            raise InvalidTokenError()
        payload = json.loads(raw)
        expires_at = (
            datetime.fromtimestamp(payload["exp"], tz=UTC) if payload["exp"] is not None else None
        )
        if expires_at is not None and expires_at <= datetime.now(UTC):
            raise InvalidTokenError()
        return AccessTokenClaims(
            sub=payload["sub"],
            email=payload["email"],
            role=payload["role"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=expires_at,
        )
