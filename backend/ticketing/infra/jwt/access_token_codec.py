# ticketing/infra/jwt/access_token_codec.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from ticketing.services._shared.errors import InvalidTokenError
from ticketing.services._shared.ports import AccessTokenCodec
from ticketing.services.auth.dto import AccessTokenClaims

#: Claims beyond ``sub`` that every access token must carry
REQUIRED_CLAIMS = ("email", "role")


def _timestamp(payload: dict[str, Any], key: str) -> datetime | None:
    value = payload.get(key)
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=UTC)


@dataclass(slots=True)
class JWTAccessTokenCodec(AccessTokenCodec):
    """
    Adapter for Flask-JWT-Extended.

    Signing key and algorithm come from ``JWT_SECRET_KEY`` / ``JWT_ALGORITHM``
    of the running app.

    :param expires: Token lifetime; ``None`` signs tokens without ``exp``.

    .. note::
       Requires an active Flask app context with proper JWT settings.
    """

    expires: timedelta | None = timedelta(minutes=15)

    def sign(self, claims: AccessTokenClaims) -> str:
        """
        Sign ``claims`` into a compact JWT.

        :param claims: Identity claims; ``sub`` becomes the JWT subject.
        :returns: Encoded token.
        """
        expires_delta: timedelta | bool = self.expires if self.expires is not None else False
        return cast(
            str,
            create_access_token(
                identity=claims.sub,
                additional_claims={"email": claims.email, "role": claims.role},
                expires_delta=expires_delta,
            ),
        )

    def verify(self, token: str) -> AccessTokenClaims:
        """
        Decode and check ``token``.

        :raises InvalidTokenError: On bad signature, malformed or expired
            token, refresh-type token, or missing claims.
        """
        if not token:
            raise InvalidTokenError()
        try:
            payload = cast(dict[str, Any], decode_token(token))
        except (PyJWTError, JWTExtendedException) as exc:
            raise InvalidTokenError() from exc

        if payload.get("type") != "access":
            raise InvalidTokenError()
        if any(not payload.get(key) for key in REQUIRED_CLAIMS):
            raise InvalidTokenError()

        return AccessTokenClaims(
            sub=str(payload["sub"]),
            email=str(payload["email"]),
            role=str(payload["role"]),
            issued_at=_timestamp(payload, "iat"),
            expires_at=_timestamp(payload, "exp"),
        )
