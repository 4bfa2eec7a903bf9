"""Persistence-layer repositories for users and refresh tokens."""

from __future__ import annotations

from ticketing.repositories.base import BaseRepository
from ticketing.repositories.refresh_token import RefreshTokenRepository
from ticketing.repositories.user import UserRepository, normalize_email

__all__ = [
    "BaseRepository",
    "RefreshTokenRepository",
    "UserRepository",
    "normalize_email",
]
