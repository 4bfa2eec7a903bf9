"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import LoginSchema, ProfileSchema, RegisterSchema, TokenResponseSchema
from .session import RevokedSessionsSchema, SessionSchema

__all__ = [
    "LoginSchema",
    "RegisterSchema",
    "TokenResponseSchema",
    "ProfileSchema",
    "SessionSchema",
    "RevokedSessionsSchema",
]
