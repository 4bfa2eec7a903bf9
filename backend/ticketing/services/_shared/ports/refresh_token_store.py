from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Protocol

from ticketing.core.clock import Clock, ensure_utc, utcnow
from ticketing.core.security import WerkzeugCredentialVerifier, fingerprint
from ticketing.services._shared.ports.credential_verifier import CredentialVerifier

#: Entropy of a raw refresh token, in bytes (hex-encoded to twice the length)
TOKEN_BYTES = 48


def new_raw_token() -> str:
    """Return a fresh opaque refresh token."""
    return secrets.token_hex(TOKEN_BYTES)


@dataclass(frozen=True, slots=True)
class RefreshTokenView:
    """
    Read-model of a refresh session. Carries no secret material.

    :ivar id: Record identifier.
    :ivar user_id: Owning user id.
    :ivar created_at: Issue time (UTC).
    :ivar expires_at: Absolute expiry (UTC).
    :ivar revoked_at: Revocation time, ``None`` while not revoked.
    """

    id: int
    user_id: int
    created_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None

    def is_active(self, now: datetime) -> bool:
        return self.revoked_at is None and ensure_utc(self.expires_at) > ensure_utc(now)


@dataclass(frozen=True, slots=True)
class IssuedRefreshToken:
    """
    Result of :meth:`RefreshTokenStore.issue`.

    :ivar raw: The opaque token. Returned once; only its hashes are kept.
    :ivar record: Persisted session snapshot.
    """

    raw: str = field(repr=False)
    record: RefreshTokenView


class RefreshTokenStore(Protocol):
    """
    Server-side store of hashed refresh tokens.

    ``validate`` and ``find_owner`` return ``None`` for every kind of miss
    (unknown, mismatched, expired, revoked) and never say which. ``redeem``
    MUST be atomic: of two concurrent calls for one record, at most one
    returns ``True``.
    """

    def issue(self, user_id: int) -> IssuedRefreshToken:
        """
        Create a session for ``user_id`` and return the raw token once.

        :raises StorageError: If persistence fails.
        """

    def validate(self, user_id: int, raw: str) -> RefreshTokenView | None:
        """Return the active record of ``user_id`` matching ``raw``."""

    def find_owner(self, raw: str) -> int | None:
        """Return the id of the user owning the active record matching ``raw``."""

    def revoke(self, token_id: int) -> RefreshTokenView | None:
        """
        Set ``revoked_at`` once. Idempotent.

        :returns: The (possibly already) revoked record, ``None`` if unknown.
        """

    def redeem(self, token_id: int) -> bool:
        """Revoke ``token_id`` if still active; ``True`` only for the caller that did."""

    def list_active(self, user_id: int) -> list[RefreshTokenView]:
        """List the user's active sessions, newest first."""

    def revoke_all(self, user_id: int) -> int:
        """Revoke every active session of the user. :returns: Rows affected."""


@dataclass(slots=True)
class _Record:
    view: RefreshTokenView
    token_hash: str
    lookup_hash: str


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store with lock-guarded compare-and-swap.

    .. note::
       Process-local; meant for unit tests and single-process tooling.
    """

    def __init__(
        self,
        *,
        ttl: timedelta = timedelta(days=30),
        verifier: CredentialVerifier | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.ttl = ttl
        self.verifier = verifier or WerkzeugCredentialVerifier()
        self.clock = clock
        self._records: dict[int, _Record] = {}
        self._seq = 0
        self._lock = threading.Lock()

    def issue(self, user_id: int) -> IssuedRefreshToken:
        raw = new_raw_token()
        token_hash = self.verifier.hash(raw)
        now = self.clock()
        with self._lock:
            self._seq += 1
            view = RefreshTokenView(
                id=self._seq,
                user_id=user_id,
                created_at=now,
                expires_at=now + self.ttl,
            )
            self._records[view.id] = _Record(view, token_hash, fingerprint(raw))
        return IssuedRefreshToken(raw=raw, record=view)

    def _active_records(self, now: datetime) -> list[_Record]:
        with self._lock:
            return [r for r in self._records.values() if r.view.is_active(now)]

    def validate(self, user_id: int, raw: str) -> RefreshTokenView | None:
        if not raw:
            return None
        now = self.clock()
        for record in self._active_records(now):
            if record.view.user_id == user_id and self.verifier.verify(raw, record.token_hash):
                return record.view
        return None

    def find_owner(self, raw: str) -> int | None:
        if not raw:
            return None
        lookup = fingerprint(raw)
        now = self.clock()
        for record in self._active_records(now):
            if record.lookup_hash == lookup and self.verifier.verify(raw, record.token_hash):
                return record.view.user_id
        return None

    def revoke(self, token_id: int) -> RefreshTokenView | None:
        now = self.clock()
        with self._lock:
            record = self._records.get(token_id)
            if record is None:
                return None
            if record.view.revoked_at is None:
                record.view = replace(record.view, revoked_at=now)
            return record.view

    def redeem(self, token_id: int) -> bool:
        now = self.clock()
        with self._lock:
            record = self._records.get(token_id)
            if record is None or not record.view.is_active(now):
                return False
            record.view = replace(record.view, revoked_at=now)
            return True

    def list_active(self, user_id: int) -> list[RefreshTokenView]:
        now = self.clock()
        views = [r.view for r in self._active_records(now) if r.view.user_id == user_id]
        return sorted(views, key=lambda v: (v.created_at, v.id), reverse=True)

    def revoke_all(self, user_id: int) -> int:
        now = self.clock()
        count = 0
        with self._lock:
            for record in self._records.values():
                if record.view.user_id == user_id and record.view.is_active(now):
                    record.view = replace(record.view, revoked_at=now)
                    count += 1
        return count

    def get(self, token_id: int) -> RefreshTokenView | None:
        """Return the snapshot of ``token_id`` regardless of state."""
        with self._lock:
            record = self._records.get(token_id)
            return record.view if record else None
