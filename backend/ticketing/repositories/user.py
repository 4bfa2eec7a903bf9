"""User repository: lookups by id/email and registration upsert."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import func, select

from ticketing.models.user import User, UserRole
from ticketing.repositories.base import BaseRepository


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Email lookups compare on ``lower(email)`` so rows written before
    normalization still match case-insensitively.
    """

    model = User

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(func.lower(User.email) == normalize_email(email))
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str) -> bool:
        """Return ``True`` when a user with the provided email exists.

        :param email: Email address to normalise and search.
        :type email: str
        :returns: ``True`` if a row is found; otherwise ``False``.
        :rtype: bool
        """
        stmt = select(User.id).where(func.lower(User.email) == normalize_email(email))
        return self.session.execute(stmt).first() is not None

    # ---------------------------- Writes ----------------------------

    def find_or_create(
        self,
        *,
        email: str,
        password: str,
        role: UserRole | str = UserRole.USER,
        **profile: Any,
    ) -> tuple[User, bool]:
        """Return the user owning ``email``, creating it when absent.

        An existing row is returned untouched; its password and profile are
        not overwritten. Callers that must reject duplicates check
        :meth:`exists_by_email` first.

        :param email: Login email (normalized by the model).
        :type email: str
        :param password: Raw password; the model hashes it.
        :type password: str
        :param role: Role for a newly created user.
        :type role: UserRole | str
        :param profile: Optional profile columns (``first_name``, ``city``...).
        :returns: ``(user, created)``.
        :rtype: tuple[User, bool]
        """
        existing = self.get_by_email(email)
        if existing is not None:
            return existing, False

        user = User(email=email, role=role, **profile)
        user.password = password
        self.add(user)
        return user, True

    def set_role(self, user: User, role: UserRole | str) -> User:
        user.role = UserRole(role)
        self.flush()
        return user
