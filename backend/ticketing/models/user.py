"""User model: login identity, role and postal profile."""

from __future__ import annotations

import enum
import re
from typing import TYPE_CHECKING, Any

from sqlalchemy import Enum as SAEnum
from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from ticketing.core.extensions import db
from ticketing.core.security import hash_secret

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .refresh_token import RefreshToken

_WHITESPACE = re.compile(r"\s+")


class UserRole(str, enum.Enum):
    """Roles carried in access tokens and checked by route guards."""

    USER = "USER"
    ADMIN = "ADMIN"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account able to log in and hold refresh sessions.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed) so uniqueness is
        case-insensitive.
    password_hash : str
        Salted hash (write-only setter via ``password``).
    role : UserRole
        ``USER`` by default; ``ADMIN`` unlocks admin-only routes.
    first_name, last_name : str | None
        Display name.
    street, house_number, postal_code, city : str | None
        Postal address. ``postal_code`` is stored without whitespace.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(UserRole, name="user_role", native_enum=False, length=16),
        nullable=False,
        default=UserRole.USER,
        server_default=UserRole.USER.value,
    )
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    street: Mapped[str | None] = mapped_column(String(200), nullable=True)
    house_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)

    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user",
        order_by="RefreshToken.id",
    )

    __table_args__ = (UniqueConstraint("email", name="uq_users_email"),)

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = hash_secret(raw)

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize.
        :type value: str
        :returns: Normalized email (lowercased/trimmed).
        :rtype: str
        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("role")
    def _coerce_role(self, key: str, value: UserRole | str) -> UserRole:
        return UserRole(value)

    @validates("postal_code")
    def _normalize_postal_code(self, key: str, value: str | None) -> str | None:
        if value is None:
            return None
        return _WHITESPACE.sub("", value)

    @validates("first_name", "last_name", "street", "house_number", "city")
    def _strip_profile_field(self, key: str, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip()
