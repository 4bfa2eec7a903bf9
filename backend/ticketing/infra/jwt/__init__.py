from __future__ import annotations

from .access_token_codec import JWTAccessTokenCodec

__all__ = ["JWTAccessTokenCodec"]
