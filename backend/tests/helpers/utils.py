"""Small doubles shared across test modules."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from ticketing.models.user import UserRole
from ticketing.repositories.user import normalize_email
from ticketing.uow.base import UnitOfWork


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2030, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


@dataclass
class FakeUser:
    """Plain stand-in for the ORM user, enough for the auth service."""

    id: int
    email: str
    password_hash: str
    role: UserRole = UserRole.USER
    first_name: str | None = None
    last_name: str | None = None
    street: str | None = None
    house_number: str | None = None
    postal_code: str | None = None
    city: str | None = None


@dataclass
class InMemoryUserRepository:
    """Dictionary-backed user lookup mirroring ``UserRepository``'s read API."""

    verifier: object
    users: dict[int, FakeUser] = field(default_factory=dict)
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    def get(self, user_id: int) -> FakeUser | None:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> FakeUser | None:
        wanted = normalize_email(email)
        return next((u for u in self.users.values() if u.email == wanted), None)

    def exists_by_email(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def find_or_create(self, *, email: str, password: str, role=UserRole.USER, **profile):
        existing = self.get_by_email(email)
        if existing is not None:
            return existing, False
        user = FakeUser(
            id=next(self._ids),
            email=normalize_email(email),
            password_hash=self.verifier.hash(password),
            role=UserRole(role),
            **profile,
        )
        self.users[user.id] = user
        return user, True


class InMemoryUnitOfWork(UnitOfWork):
    """No-op transaction over :class:`InMemoryUserRepository`."""

    def __init__(self, users: InMemoryUserRepository) -> None:
        self.users = users
        self.refresh_tokens = None

    def __enter__(self) -> InMemoryUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None

    def commit(self) -> None:
        return None

    def rollback(self) -> None:
        return None


def persist(session, *objs):
    """Commit and reload ``objs`` so their columns stay readable once a
    request's teardown has closed the session."""
    session.commit()
    for obj in objs:
        session.refresh(obj)
    return objs[0] if len(objs) == 1 else objs
