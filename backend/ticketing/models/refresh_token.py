"""Server-side refresh session records."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ticketing.core.clock import ensure_utc
from ticketing.core.extensions import db

from .base import PKMixin, ReprMixin

if TYPE_CHECKING:
    from .user import User


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    One refresh session of a user.

    The raw token handed to the client is never stored. ``token_hash`` is a
    salted slow hash used to authenticate a presented token; ``lookup_hash``
    is an unsalted SHA-256 fingerprint used only to narrow candidates to the
    owning user.

    A record is *active* while ``revoked_at`` is null and ``expires_at`` lies
    strictly in the future. Records are revoked, never deleted.

    Fields
    ------
    user_id : int
        Owning user.
    token_hash : str
        Salted hash of the raw token.
    lookup_hash : str
        SHA-256 hex digest of the raw token.
    created_at : datetime
        Issue time.
    expires_at : datetime
        Absolute expiry.
    revoked_at : datetime | None
        Set once on logout, rotation or administrative revocation.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    lookup_hash: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship(back_populates="refresh_tokens")

    def is_active(self, now: datetime) -> bool:
        """
        Return whether the session can still be redeemed at ``now``.

        :param now: Reference time (timezone-aware).
        :type now: datetime.datetime
        :returns: ``True`` when not revoked and ``expires_at > now``.
        :rtype: bool
        """
        if self.revoked_at is not None:
            return False
        return ensure_utc(self.expires_at) > ensure_utc(now)
