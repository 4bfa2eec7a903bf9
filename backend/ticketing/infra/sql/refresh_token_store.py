# ticketing/infra/sql/refresh_token_store.py
from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ticketing.core.clock import Clock, ensure_utc, utcnow
from ticketing.core.security import WerkzeugCredentialVerifier, fingerprint
from ticketing.models.refresh_token import RefreshToken
from ticketing.repositories.refresh_token import RefreshTokenRepository
from ticketing.services._shared.errors import StorageError
from ticketing.services._shared.ports import (
    CredentialVerifier,
    IssuedRefreshToken,
    RefreshTokenStore,
    RefreshTokenView,
    new_raw_token,
)

log = logging.getLogger(__name__)


def _to_view(token: RefreshToken) -> RefreshTokenView:
    return RefreshTokenView(
        id=token.id,
        user_id=token.user_id,
        created_at=ensure_utc(token.created_at),
        expires_at=ensure_utc(token.expires_at),
        revoked_at=ensure_utc(token.revoked_at) if token.revoked_at else None,
    )


class SQLRefreshTokenStore(RefreshTokenStore):
    """
    Relational refresh token store.

    Works inside the caller's transaction: every write only flushes, and the
    surrounding Unit of Work commits or rolls back. Rotation therefore revokes
    the old row and inserts the new one atomically.

    :param verifier: Salted hash used for ``token_hash``.
    :param ttl: Lifetime of issued tokens.
    :param clock: UTC time source.
    :param session: Optional explicit session; defaults to ``db.session``.
    """

    def __init__(
        self,
        *,
        verifier: CredentialVerifier | None = None,
        ttl: timedelta = timedelta(days=30),
        clock: Clock = utcnow,
        session: Session | None = None,
    ) -> None:
        self.verifier = verifier or WerkzeugCredentialVerifier()
        self.ttl = ttl
        self.clock = clock
        self._session = session

    @property
    def repo(self) -> RefreshTokenRepository:
        return RefreshTokenRepository(self._session)

    # ------------------------------ Issue ------------------------------

    def issue(self, user_id: int) -> IssuedRefreshToken:
        raw = new_raw_token()
        now = self.clock()
        token = RefreshToken(
            user_id=user_id,
            token_hash=self.verifier.hash(raw),
            lookup_hash=fingerprint(raw),
            created_at=now,
            expires_at=now + self.ttl,
        )
        try:
            self.repo.add(token)
        except SQLAlchemyError as exc:
            log.error("refresh_store.issue_failed", exc_info=True, extra={"user_id": user_id})
            raise StorageError() from exc
        return IssuedRefreshToken(raw=raw, record=_to_view(token))

    # ------------------------------ Lookup -----------------------------

    def validate(self, user_id: int, raw: str) -> RefreshTokenView | None:
        if not raw:
            return None
        for token in self.repo.list_active_for_user(user_id, self.clock()):
            if self.verifier.verify(raw, token.token_hash):
                return _to_view(token)
        return None

    def find_owner(self, raw: str) -> int | None:
        if not raw:
            return None
        for token in self.repo.list_active_by_lookup(fingerprint(raw), self.clock()):
            if self.verifier.verify(raw, token.token_hash):
                return token.user_id
        return None

    def list_active(self, user_id: int) -> list[RefreshTokenView]:
        return [_to_view(t) for t in self.repo.list_active_for_user(user_id, self.clock())]

    # ------------------------------ Revoke -----------------------------

    def revoke(self, token_id: int) -> RefreshTokenView | None:
        try:
            token = self.repo.revoke(token_id, self.clock())
        except SQLAlchemyError as exc:
            log.error("refresh_store.revoke_failed", exc_info=True, extra={"token_id": token_id})
            raise StorageError() from exc
        return _to_view(token) if token is not None else None

    def redeem(self, token_id: int) -> bool:
        try:
            return self.repo.revoke_if_active(token_id, self.clock())
        except SQLAlchemyError as exc:
            log.error("refresh_store.redeem_failed", exc_info=True, extra={"token_id": token_id})
            raise StorageError() from exc

    def revoke_all(self, user_id: int) -> int:
        try:
            return self.repo.revoke_all_for_user(user_id, self.clock())
        except SQLAlchemyError as exc:
            log.error("refresh_store.revoke_all_failed", exc_info=True, extra={"user_id": user_id})
            raise StorageError() from exc
