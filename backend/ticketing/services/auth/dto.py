# ticketing/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email (any case).
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for registration.

    :param email: Login email (any case; stored lowercased).
    :type email: str
    :param password: Raw password.
    :type password: str
    :param first_name: Given name.
    :param last_name: Family name.
    :param street: Street name.
    :param house_number: House number, free form ("12a").
    :param postal_code: Postal code; whitespace is dropped on save.
    :param city: City.
    """

    email: str
    password: str = field(repr=False)
    first_name: str | None = None
    last_name: str | None = None
    street: str | None = None
    house_number: str | None = None
    postal_code: str | None = None
    city: str | None = None

    def profile(self) -> dict[str, str | None]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "street": self.street,
            "house_number": self.house_number,
            "postal_code": self.postal_code,
            "city": self.city,
        }


# --------------------------- Token DTOs ----------------------------------- #


@dataclass(frozen=True, slots=True)
class AccessTokenClaims:
    """
    Identity claims carried by an access token.

    ``issued_at`` and ``expires_at`` are filled in by the codec on decode and
    excluded from equality, so ``verify(sign(claims)) == claims``.

    :param sub: User id as a string.
    :type sub: str
    :param email: Normalized email.
    :type email: str
    :param role: ``"USER"`` or ``"ADMIN"``.
    :type role: str
    :param issued_at: ``iat`` claim, when decoded.
    :type issued_at: datetime | None
    :param expires_at: ``exp`` claim, when present.
    :type expires_at: datetime | None
    """

    sub: str
    email: str
    role: str
    issued_at: datetime | None = field(default=None, compare=False)
    expires_at: datetime | None = field(default=None, compare=False)


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Raw opaque refresh token (shown once, never stored).
    :type refresh_token: str
    """

    access_token: str = field(repr=False)
    refresh_token: str = field(repr=False)


@dataclass(frozen=True, slots=True)
class CurrentUser:
    """Identity attached to an authenticated request."""

    id: int
    email: str
    role: str


@dataclass(frozen=True, slots=True)
class UserProfileOut:
    """Public profile; never carries the password hash."""

    id: int
    email: str
    role: str
    first_name: str | None
    last_name: str | None
    street: str | None
    house_number: str | None
    postal_code: str | None
    city: str | None


# ------------------------ Config DTO ------------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime; ``None`` signs without ``exp``.
    :type access_expires: timedelta | None
    :param refresh_expires: Refresh token lifetime.
    :type refresh_expires: timedelta
    """

    access_expires: timedelta | None
    refresh_expires: timedelta
