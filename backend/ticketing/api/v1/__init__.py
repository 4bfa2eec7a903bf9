"""API v1 blueprints."""

from __future__ import annotations

from flask import Blueprint

API_VERSION = "v1"

# Blueprints are imported only here to keep the import graph acyclic.
from .auth import bp as auth_bp  # noqa: E402
from .health import bp as health_bp  # noqa: E402
from .users import bp as users_bp  # noqa: E402

# (blueprint, url_prefix relative to the version root)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),  # -> /api/v1
    (auth_bp, "/auth"),  # -> /api/v1/auth
    (users_bp, "/users"),
]
