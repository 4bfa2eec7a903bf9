"""Tests for the Flask-JWT-Extended access token codec."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt as pyjwt
import pytest

from ticketing.infra.jwt import JWTAccessTokenCodec
from ticketing.services._shared.errors import InvalidTokenError
from ticketing.services.auth.dto import AccessTokenClaims

CLAIMS = AccessTokenClaims(sub="42", email="ada@example.com", role="ADMIN")


@pytest.fixture()
def codec(app):
    return JWTAccessTokenCodec(expires=timedelta(minutes=15))


def _forge(app, payload, *, secret=None):
    base = {"sub": "42", "email": "ada@example.com", "role": "USER", "type": "access"}
    base.update(payload)
    return pyjwt.encode(
        base,
        secret or app.config["JWT_SECRET_KEY"],
        algorithm=app.config["JWT_ALGORITHM"],
    )


class TestJWTAccessTokenCodec:
    def test_sign_then_verify_returns_claims(self, codec):
        decoded = codec.verify(codec.sign(CLAIMS))
        assert decoded == CLAIMS
        assert decoded.issued_at is not None
        assert decoded.expires_at is not None
        assert decoded.expires_at - decoded.issued_at == timedelta(minutes=15)

    def test_no_expiry_when_lifetime_disabled(self, app):
        codec = JWTAccessTokenCodec(expires=None)
        token = codec.sign(CLAIMS)
        assert "exp" not in pyjwt.decode(token, options={"verify_signature": False})
        assert codec.verify(token).expires_at is None

    def test_expired_token_rejected(self, app):
        codec = JWTAccessTokenCodec(expires=timedelta(seconds=-5))
        with pytest.raises(InvalidTokenError):
            codec.verify(codec.sign(CLAIMS))

    def test_foreign_signature_rejected(self, codec, app):
        with pytest.raises(InvalidTokenError):
            codec.verify(_forge(app, {}, secret="not-the-signing-secret-at-all-000"))

    def test_garbage_rejected(self, codec):
        for token in ("", "not.a.jwt", "abc"):
            with pytest.raises(InvalidTokenError):
                codec.verify(token)

    def test_refresh_type_rejected(self, codec, app):
        with pytest.raises(InvalidTokenError):
            codec.verify(_forge(app, {"type": "refresh"}))

    def test_missing_role_rejected(self, codec, app):
        token = pyjwt.encode(
            {"sub": "42", "email": "ada@example.com", "type": "access"},
            app.config["JWT_SECRET_KEY"],
            algorithm=app.config["JWT_ALGORITHM"],
        )
        with pytest.raises(InvalidTokenError):
            codec.verify(token)

    def test_forged_with_right_secret_is_accepted(self, codec, app):
        iat = int(datetime.now(UTC).timestamp())
        decoded = codec.verify(_forge(app, {"iat": iat}))
        assert decoded.sub == "42"
        assert decoded.role == "USER"
