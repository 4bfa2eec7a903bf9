# ticketing/services/auth/service.py
from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ticketing.core.security import WerkzeugCredentialVerifier
from ticketing.models.user import User
from ticketing.repositories.user import UserRepository
from ticketing.services._shared.base import BaseService, UnitOfWorkFactory
from ticketing.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    StorageError,
    violates,
)
from ticketing.services._shared.ports import (
    AccessTokenCodec,
    CredentialVerifier,
    RefreshTokenStore,
    RefreshTokenView,
)
from ticketing.services.auth.dto import (
    AccessTokenClaims,
    CurrentUser,
    LoginIn,
    RegisterIn,
    TokenPairOut,
    UserProfileOut,
)

log = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_REFRESH = "Invalid or expired refresh token"
INVALID_TOKEN = "Invalid or expired token"


class AuthService(BaseService):
    """
    Session manager: login, registration, refresh rotation, logout, profile.

    A session is a chain of refresh-token records. Each record is Active until
    it expires or is revoked; nothing leaves Revoked or Expired. Rotation
    redeems the presented record with a compare-and-swap so a raw token mints
    at most one successor, even under concurrent requests.

    Collaborators are injected by the composition root
    (:mod:`ticketing.infra.wiring`); users are read through the Unit of Work.
    """

    def __init__(
        self,
        *,
        token_codec: AccessTokenCodec,
        refresh_store: RefreshTokenStore,
        verifier: CredentialVerifier | None = None,
        uow_factory: UnitOfWorkFactory | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_codec: Signs/verifies access tokens.
        :param refresh_store: Server-side store of hashed refresh tokens.
        :param verifier: Salted hash verifier for passwords.
        :param uow_factory: Optional Unit of Work override (tests).
        """
        super().__init__(uow_factory=uow_factory)
        self.codec = token_codec
        self.refresh_store = refresh_store
        self.verifier = verifier or WerkzeugCredentialVerifier()
        self._dummy_hash: str | None = None

    # ------------------------------------------------------------------ #
    # Login / registration
    # ------------------------------------------------------------------ #

    def authenticate_user(self, dto: LoginIn) -> TokenPairOut:
        """
        Verify credentials and issue a fresh token pair.

        Unknown email and wrong password fail identically, and both run one
        slow hash comparison.

        :param dto: Login input.
        :returns: Access token and raw refresh token.
        :raises AuthenticationError: On any credential mismatch.
        :raises StorageError: If the refresh session cannot be persisted.
        """
        log.debug("auth.login.attempt")
        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                user = repo.get_by_email(dto.email)
                if user is None:
                    self.verifier.verify(dto.password, self._timing_hash())
                    log.warning("auth.login.rejected", extra={"event": "unknown_email"})
                    raise AuthenticationError(INVALID_CREDENTIALS)
                if not self.verifier.verify(dto.password, user.password_hash):
                    log.warning(
                        "auth.login.rejected",
                        extra={"event": "bad_password", "user_id": user.id},
                    )
                    raise AuthenticationError(INVALID_CREDENTIALS)
                pair = self._issue_pair(user)
                user_id = user.id
        except SQLAlchemyError as exc:
            log.error("auth.login.storage_error", exc_info=True)
            raise StorageError() from exc

        log.info("auth.login.succeeded", extra={"user_id": user_id})
        return pair

    def register_user(self, dto: RegisterIn) -> TokenPairOut:
        """
        Create an account and issue its first token pair.

        The duplicate check runs here, before the repository's find-or-create,
        so the conflict decision stays at this layer.

        :param dto: Registration input.
        :returns: Access token and raw refresh token.
        :raises ConflictError: If the email is already registered.
        :raises StorageError: On persistence failure.
        """
        try:
            with self.rw_uow() as uow:
                repo: UserRepository = uow.users
                if repo.exists_by_email(dto.email):
                    raise ConflictError("User", "email already in use")
                user, _ = repo.find_or_create(
                    email=dto.email,
                    password=dto.password,
                    **dto.profile(),
                )
                pair = self._issue_pair(user)
                user_id = user.id
        except IntegrityError as exc:
            if violates(exc, "uq_users_email") or "unique" in str(exc.orig).lower():
                raise ConflictError("User", "email already in use") from exc
            log.error("auth.register.storage_error", exc_info=True)
            raise StorageError() from exc
        except SQLAlchemyError as exc:
            log.error("auth.register.storage_error", exc_info=True)
            raise StorageError() from exc

        log.info("auth.register.succeeded", extra={"user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Refresh rotation
    # ------------------------------------------------------------------ #

    def refresh_user_tokens(self, raw_refresh_token: str | None) -> TokenPairOut:
        """
        Redeem a refresh token once and issue its successor.

        Steps, inside one transaction: resolve the owner, validate the token
        for that owner, redeem it (conditional revoke), re-read the user,
        issue a new pair. Exactly one row is revoked and one created.

        :param raw_refresh_token: Raw token from the cookie.
        :returns: New access token and new raw refresh token.
        :raises AuthenticationError: If the token is missing, unknown,
            expired, revoked, already redeemed, or its user is gone.
        :raises StorageError: On persistence failure.
        """
        if not raw_refresh_token:
            raise AuthenticationError(INVALID_REFRESH)

        try:
            with self.rw_uow() as uow:
                owner_id = self.refresh_store.find_owner(raw_refresh_token)
                record = (
                    self.refresh_store.validate(owner_id, raw_refresh_token)
                    if owner_id is not None
                    else None
                )
                if record is None:
                    log.warning("auth.refresh.rejected", extra={"event": "no_active_match"})
                    raise AuthenticationError(INVALID_REFRESH)

                if not self.refresh_store.redeem(record.id):
                    log.warning(
                        "auth.refresh.rejected",
                        extra={"event": "already_redeemed", "token_id": record.id},
                    )
                    raise AuthenticationError(INVALID_REFRESH)

                user = uow.users.get(record.user_id)
                if user is None:
                    raise AuthenticationError(INVALID_REFRESH)
                pair = self._issue_pair(user)
        except SQLAlchemyError as exc:
            log.error("auth.refresh.storage_error", exc_info=True)
            raise StorageError() from exc

        log.info(
            "auth.refresh.rotated",
            extra={"user_id": record.user_id, "token_id": record.id},
        )
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout_user(self, raw_refresh_token: str | None) -> None:
        """
        Revoke the session behind ``raw_refresh_token`` if there is one.

        Always returns normally: a missing, unknown or already revoked token
        is a successful logout, and backend failures are logged, not raised.

        :param raw_refresh_token: Raw token from the cookie, if any.
        """
        if not raw_refresh_token:
            return

        try:
            with self.rw_uow():
                owner_id = self.refresh_store.find_owner(raw_refresh_token)
                if owner_id is None:
                    return
                record = self.refresh_store.validate(owner_id, raw_refresh_token)
                if record is None:
                    return
                self.refresh_store.revoke(record.id)
        except (StorageError, SQLAlchemyError):
            log.error("auth.logout.storage_error", exc_info=True)
            return

        log.info("auth.logout.revoked", extra={"user_id": record.user_id, "token_id": record.id})

    # ------------------------------------------------------------------ #
    # Profile / request authentication
    # ------------------------------------------------------------------ #

    def get_user_profile(self, user_id: int) -> UserProfileOut:
        """
        Return the public profile of ``user_id``.

        :raises NotFoundError: If the user does not exist.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return UserProfileOut(
                id=user.id,
                email=user.email,
                role=user.role.value,
                first_name=user.first_name,
                last_name=user.last_name,
                street=user.street,
                house_number=user.house_number,
                postal_code=user.postal_code,
                city=user.city,
            )

    def authenticate_request(self, access_token: str | None) -> CurrentUser:
        """
        Resolve the bearer token of a request into the current user.

        The user is re-read so deleted accounts and role changes take effect
        before the token expires.

        :param access_token: Raw bearer token.
        :returns: ``CurrentUser`` with id, email and current role.
        :raises AuthenticationError: On missing/invalid token or unknown user.
        """
        if not access_token:
            log.debug("auth.request.no_token")
            raise AuthenticationError(INVALID_TOKEN)
        try:
            claims = self.codec.verify(access_token)
            user_id = int(claims.sub)
        except (InvalidTokenError, ValueError) as exc:
            log.warning("auth.request.bad_token")
            raise AuthenticationError(INVALID_TOKEN) from exc

        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                log.warning("auth.request.unknown_user", extra={"user_id": user_id})
                raise AuthenticationError(INVALID_TOKEN)
            return CurrentUser(id=user.id, email=user.email, role=user.role.value)

    def authorize(self, user: CurrentUser, roles: Iterable[str]) -> CurrentUser:
        """
        Check that ``user`` holds one of ``roles``.

        :param user: Identity resolved by :meth:`authenticate_request`.
        :param roles: Accepted role values.
        :returns: The same user.
        :raises AuthorizationError: If the role is not accepted.
        """
        allowed = set(roles)
        if user.role not in allowed:
            log.warning("auth.request.forbidden", extra={"user_id": user.id})
            required = " or ".join(sorted(allowed)).title()
            raise AuthorizationError(f"Access denied. {required} role required")
        return user

    # ------------------------------------------------------------------ #
    # Session administration
    # ------------------------------------------------------------------ #

    def list_sessions(self, user_id: int) -> list[RefreshTokenView]:
        """Return the active refresh sessions of ``user_id``, newest first."""
        with self.ro_uow():
            return self.refresh_store.list_active(user_id)

    def revoke_all_sessions(self, user_id: int) -> int:
        """
        Revoke every active refresh session of ``user_id``.

        :returns: Number of sessions revoked.
        :raises NotFoundError: If the user does not exist.
        :raises StorageError: On persistence failure.
        """
        try:
            with self.rw_uow() as uow:
                if uow.users.get(user_id) is None:
                    raise NotFoundError("User", user_id)
                count = self.refresh_store.revoke_all(user_id)
        except SQLAlchemyError as exc:
            log.error("auth.revoke_all.storage_error", exc_info=True)
            raise StorageError() from exc

        log.info("auth.sessions.revoked_all count=%s", count, extra={"user_id": user_id})
        return count

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue_pair(self, user: User) -> TokenPairOut:
        claims = AccessTokenClaims(sub=str(user.id), email=user.email, role=user.role.value)
        issued = self.refresh_store.issue(user.id)
        access = self.codec.sign(claims)
        return TokenPairOut(access_token=access, refresh_token=issued.raw)

    def _timing_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self.verifier.hash("timing-equalizer")
        return self._dummy_hash
