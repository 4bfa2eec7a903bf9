"""HTTP edge settings: proxy headers and cross-origin access.

The refresh token only reaches the API from a browser on another origin when
CORS allows credentials, so the two concerns are configured together.
"""

from __future__ import annotations

import logging

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from ticketing.core.logger import REQUEST_ID_HEADER

log = logging.getLogger(__name__)


def cors_origins(raw: str | None) -> list[str] | None:
    """Parse ``CORS_ORIGINS``; ``None`` means any origin (blank or ``*``)."""
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    if not origins or origins == ["*"]:
        return None
    return origins


def init_app(app: Flask) -> None:
    """Install ``ProxyFix`` (``USE_PROXYFIX``) and the ``/api/*`` CORS policy.

    Parameters
    ----------
    app: flask.Flask
        Application to configure. With explicit ``CORS_ORIGINS`` credentials
        are allowed and the refresh cookie travels cross-origin; with a
        wildcard it does not.
    """
    cfg = app.config
    if cfg.get("USE_PROXYFIX", True):
        # one trusted hop; X-Forwarded-Proto decides whether requests count as HTTPS
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    origins = cors_origins(cfg.get("CORS_ORIGINS"))
    CORS(
        app,
        resources={r"/api/*": {"origins": origins or "*"}},
        supports_credentials=origins is not None,
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=cfg.get("CORS_MAX_AGE", 600),
    )

    samesite = str(cfg.get("REFRESH_COOKIE_SAMESITE", "Lax")).lower()
    if samesite == "none" and not cfg.get("REFRESH_COOKIE_SECURE", False):
        log.warning("edge.refresh_cookie.insecure: SameSite=None without Secure is rejected by browsers")
