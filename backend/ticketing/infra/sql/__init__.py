from __future__ import annotations

from .refresh_token_store import SQLRefreshTokenStore

__all__ = ["SQLRefreshTokenStore"]
