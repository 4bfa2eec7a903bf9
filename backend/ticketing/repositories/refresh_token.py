"""Refresh token repository with conditional (compare-and-swap) revocation."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from ticketing.models.refresh_token import RefreshToken
from ticketing.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`.

    "Active" always means ``revoked_at IS NULL AND expires_at > now``; the
    comparison is strict so a token expiring exactly at ``now`` is dead.
    """

    model = RefreshToken

    @staticmethod
    def _active(now: datetime):
        return (RefreshToken.revoked_at.is_(None), RefreshToken.expires_at > now)

    def _expire_cached(self, predicate: Callable[[RefreshToken], bool]) -> None:
        # Core UPDATEs bypass the identity map; reload revoked_at on next access
        for obj in list(self.session.identity_map.values()):
            if isinstance(obj, RefreshToken) and predicate(obj):
                self.session.expire(obj, ["revoked_at"])

    # ------------------------------ Reads ------------------------------

    def list_active_for_user(self, user_id: int, now: datetime) -> list[RefreshToken]:
        """Return the user's active tokens, newest first.

        :param user_id: Owning user id.
        :type user_id: int
        :param now: Reference time.
        :type now: datetime.datetime
        :returns: Active records.
        :rtype: list[RefreshToken]
        """
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.user_id == user_id, *self._active(now))
            .order_by(RefreshToken.created_at.desc(), RefreshToken.id.desc())
        )
        return cast(list[RefreshToken], list(self.session.execute(stmt).scalars().all()))

    def list_active_by_lookup(self, lookup_hash: str, now: datetime) -> list[RefreshToken]:
        """Return active tokens sharing the given fingerprint.

        Normally zero or one row; the salted hash still decides the match.
        """
        stmt = select(RefreshToken).where(
            RefreshToken.lookup_hash == lookup_hash, *self._active(now)
        )
        return cast(list[RefreshToken], list(self.session.execute(stmt).scalars().all()))

    # ------------------------------ Writes -----------------------------

    def revoke(self, token_id: int, now: datetime) -> RefreshToken | None:
        """Set ``revoked_at`` once; later calls return the record unchanged.

        :param token_id: Record id.
        :type token_id: int
        :param now: Revocation time.
        :type now: datetime.datetime
        :returns: The record, or ``None`` when the id does not exist.
        :rtype: RefreshToken | None
        """
        token = self.get(token_id)
        if token is None:
            return None
        if token.revoked_at is None:
            token.revoked_at = now
            self.flush()
        return token

    def revoke_if_active(self, token_id: int, now: datetime) -> bool:
        """Revoke ``token_id`` only if it is still active.

        Issued as a single conditional ``UPDATE`` so that, of two concurrent
        callers, only the one whose statement actually changed the row gets
        ``True``.

        :param token_id: Record id.
        :type token_id: int
        :param now: Revocation time and expiry reference.
        :type now: datetime.datetime
        :returns: ``True`` when exactly one row was revoked by this call.
        :rtype: bool
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id, *self._active(now))
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        self._expire_cached(lambda token: token.id == token_id)
        return result.rowcount == 1

    def revoke_all_for_user(self, user_id: int, now: datetime) -> int:
        """Revoke every active token of ``user_id``.

        :returns: Number of rows revoked.
        :rtype: int
        """
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, *self._active(now))
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        self._expire_cached(lambda token: token.user_id == user_id)
        return int(result.rowcount or 0)
