"""Service layer public API.

Callers import from :mod:`ticketing.services` without knowing the internal
structure.

Re-exports
----------
- Base primitives (from ``ticketing.services._shared.base``)
    * :class:`BaseService`

- Auth service (from ``ticketing.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`LoginIn`, :class:`RegisterIn`, :class:`TokenPairOut`,
      :class:`CurrentUser`, :class:`UserProfileOut`, :class:`AuthTokenConfig`
"""

from __future__ import annotations

from ._shared.base import BaseService
from .auth.dto import (
    AuthTokenConfig,
    CurrentUser,
    LoginIn,
    RegisterIn,
    TokenPairOut,
    UserProfileOut,
)
from .auth.service import AuthService

__all__ = [
    "BaseService",
    "AuthService",
    "AuthTokenConfig",
    "CurrentUser",
    "LoginIn",
    "RegisterIn",
    "TokenPairOut",
    "UserProfileOut",
]
