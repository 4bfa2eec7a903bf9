"""Refresh-token cookie lifecycle."""

from __future__ import annotations

from datetime import timedelta

from flask import Response, current_app, request


def _name() -> str:
    return str(current_app.config.get("REFRESH_COOKIE_NAME", "refresh_token"))


def _path() -> str:
    return str(current_app.config.get("REFRESH_COOKIE_PATH", "/"))


def set_refresh_cookie(response: Response, raw_token: str) -> Response:
    """Attach ``raw_token`` as an HTTP-only cookie living ``REFRESH_TTL_DAYS`` days."""

    cfg = current_app.config
    max_age = timedelta(days=int(cfg.get("REFRESH_TTL_DAYS", 30)))
    response.set_cookie(
        _name(),
        raw_token,
        max_age=int(max_age.total_seconds()),
        path=_path(),
        secure=bool(cfg.get("REFRESH_COOKIE_SECURE", False)),
        httponly=True,
        samesite=cfg.get("REFRESH_COOKIE_SAMESITE", "Lax"),
    )
    return response


def clear_refresh_cookie(response: Response) -> Response:
    """Expire the refresh cookie on the client (same name and path)."""

    response.delete_cookie(
        _name(),
        path=_path(),
        secure=bool(current_app.config.get("REFRESH_COOKIE_SECURE", False)),
        httponly=True,
        samesite=current_app.config.get("REFRESH_COOKIE_SAMESITE", "Lax"),
    )
    return response


def get_refresh_cookie() -> str | None:
    """Return the raw refresh token of the current request, if any."""

    return request.cookies.get(_name()) or None
