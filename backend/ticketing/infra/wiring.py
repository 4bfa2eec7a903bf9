"""Composition root: build the auth service and its adapters from app config."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import Any, cast

from flask import Flask, current_app

from ticketing.core.security import WerkzeugCredentialVerifier
from ticketing.infra.jwt import JWTAccessTokenCodec
from ticketing.infra.sql import SQLRefreshTokenStore
from ticketing.services.auth.dto import AuthTokenConfig
from ticketing.services.auth.service import AuthService

EXTENSION_KEY = "auth_service"


def token_config(config: Mapping[str, Any]) -> AuthTokenConfig:
    """Derive token lifetimes from ``ACCESS_TOKEN_TTL_MINUTES`` and ``REFRESH_TTL_DAYS``.

    Parameters
    ----------
    config: Mapping[str, Any]
        Flask configuration (or any mapping with the same keys).

    Returns
    -------
    AuthTokenConfig
        ``access_expires`` is ``None`` when the access TTL is ``0``.
    """
    minutes = int(config.get("ACCESS_TOKEN_TTL_MINUTES", 15))
    days = int(config.get("REFRESH_TTL_DAYS", 30))
    return AuthTokenConfig(
        access_expires=timedelta(minutes=minutes) if minutes > 0 else None,
        refresh_expires=timedelta(days=days),
    )


def build_auth_service(config: Mapping[str, Any]) -> AuthService:
    """Assemble :class:`AuthService` with the JWT codec and the SQL store."""
    cfg = token_config(config)
    verifier = WerkzeugCredentialVerifier(method=config.get("PASSWORD_HASH_METHOD"))
    return AuthService(
        token_codec=JWTAccessTokenCodec(expires=cfg.access_expires),
        refresh_store=SQLRefreshTokenStore(verifier=verifier, ttl=cfg.refresh_expires),
        verifier=verifier,
    )


def init_app(app: Flask) -> None:
    """Register the app-lifetime :class:`AuthService` under ``app.extensions``."""
    app.extensions[EXTENSION_KEY] = build_auth_service(app.config)


def get_auth_service() -> AuthService:
    """Return the service registered for the current app."""
    return cast(AuthService, current_app.extensions[EXTENSION_KEY])
