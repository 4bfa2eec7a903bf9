"""AuthService against the SQL refresh store and a stub access token codec."""

from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import delete

from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.utils import FrozenClock
from ticketing.core.clock import utcnow
from ticketing.infra.sql import SQLRefreshTokenStore
from ticketing.models.refresh_token import RefreshToken
from ticketing.models.user import User
from ticketing.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
)
from ticketing.services._shared.ports import StubAccessTokenCodec
from ticketing.services.auth.dto import CurrentUser, LoginIn, RegisterIn, TokenPairOut
from ticketing.services.auth.service import INVALID_CREDENTIALS, INVALID_TOKEN, AuthService


@pytest.fixture()
def clock():
    return FrozenClock(utcnow())


@pytest.fixture()
def service(clock) -> AuthService:
    return AuthService(
        token_codec=StubAccessTokenCodec(),
        refresh_store=SQLRefreshTokenStore(ttl=timedelta(days=30), clock=clock),
    )


@pytest.fixture()
def user(session):
    u = UserFactory(email="ada@example.com")
    session.commit()
    return u


def _rows(session, user_id):
    return session.query(RefreshToken).filter_by(user_id=user_id).order_by(RefreshToken.id).all()


# --------------------------------- Login ---------------------------------- #
class TestLogin:
    def test_issues_pair_and_one_row(self, service, user, session):
        pair = service.authenticate_user(LoginIn(email="ada@example.com", password=DEFAULT_PASSWORD))

        assert isinstance(pair, TokenPairOut)
        claims = service.codec.verify(pair.access_token)
        assert (claims.sub, claims.email, claims.role) == (str(user.id), "ada@example.com", "USER")
        rows = _rows(session, user.id)
        assert len(rows) == 1
        assert rows[0].revoked_at is None

    def test_email_is_case_insensitive(self, service, user):
        pair = service.authenticate_user(LoginIn(email="  ADA@Example.com", password=DEFAULT_PASSWORD))
        assert service.codec.verify(pair.access_token).sub == str(user.id)

    def test_unknown_email_and_wrong_password_fail_identically(self, service, user):
        with pytest.raises(AuthenticationError) as unknown:
            service.authenticate_user(LoginIn(email="ghost@example.com", password=DEFAULT_PASSWORD))
        with pytest.raises(AuthenticationError) as wrong:
            service.authenticate_user(LoginIn(email="ada@example.com", password="wrong-password"))

        assert type(unknown.value) is type(wrong.value)
        assert str(unknown.value) == str(wrong.value) == INVALID_CREDENTIALS

    def test_failed_login_creates_no_row(self, service, user, session):
        with pytest.raises(AuthenticationError):
            service.authenticate_user(LoginIn(email="ada@example.com", password="nope-nope"))
        assert _rows(session, user.id) == []


# ------------------------------ Registration ------------------------------ #
class TestRegister:
    def _dto(self, email="new@example.com"):
        return RegisterIn(
            email=email,
            password="longenough",
            first_name="Grace",
            last_name="Hopper",
            street="Main St",
            house_number="1a",
            postal_code="10 115",
            city="Berlin",
        )

    def test_creates_user_and_issues_pair(self, service, session):
        pair = service.register_user(self._dto())
        claims = service.codec.verify(pair.access_token)

        profile = service.get_user_profile(int(claims.sub))
        assert profile.email == "new@example.com"
        assert profile.postal_code == "10115"
        assert profile.role == "USER"
        assert len(_rows(session, int(claims.sub))) == 1

    def test_duplicate_email_conflicts(self, service, user):
        with pytest.raises(ConflictError):
            service.register_user(self._dto(email="ADA@example.com"))


# ------------------------------- Rotation --------------------------------- #
class TestRefresh:
    def test_rotation_is_single_use(self, service, user, session):
        first = service.authenticate_user(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        second = service.refresh_user_tokens(first.refresh_token)
        assert second.refresh_token != first.refresh_token

        with pytest.raises(AuthenticationError):
            service.refresh_user_tokens(first.refresh_token)

        rows = _rows(session, user.id)
        assert len(rows) == 2
        assert rows[0].revoked_at is not None
        assert rows[1].revoked_at is None

    def test_successor_can_rotate_again(self, service, user):
        pair = service.authenticate_user(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        for _ in range(3):
            pair = service.refresh_user_tokens(pair.refresh_token)
        assert service.codec.verify(pair.access_token).sub == str(user.id)

    @pytest.mark.parametrize("raw", [None, "", "not-a-real-token"])
    def test_missing_or_unknown_token_rejected(self, service, raw):
        with pytest.raises(AuthenticationError):
            service.refresh_user_tokens(raw)

    def test_expired_token_rejected(self, service, user, clock):
        pair = service.authenticate_user(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        clock.advance(days=30)
        with pytest.raises(AuthenticationError):
            service.refresh_user_tokens(pair.refresh_token)

    def test_deleted_user_cannot_refresh(self, service, user, session):
        pair = service.authenticate_user(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        # Core DELETE leaves the session row orphaned (SQLite does not enforce FKs here)
        session.execute(delete(User).where(User.id == user.id))
        session.commit()

        with pytest.raises(AuthenticationError):
            service.refresh_user_tokens(pair.refresh_token)


# -------------------------------- Logout ---------------------------------- #
class TestLogout:
    def test_logout_twice_revokes_once(self, service, user, session):
        pair = service.authenticate_user(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        service.logout_user(pair.refresh_token)
        revoked_at = _rows(session, user.id)[0].revoked_at
        assert revoked_at is not None

        service.logout_user(pair.refresh_token)
        session.expire_all()
        assert _rows(session, user.id)[0].revoked_at == revoked_at

        with pytest.raises(AuthenticationError):
            service.refresh_user_tokens(pair.refresh_token)

    @pytest.mark.parametrize("raw", [None, "", "unknown-token"])
    def test_logout_without_session_is_noop(self, service, raw):
        assert service.logout_user(raw) is None


# --------------------------- Profile / requests --------------------------- #
class TestProfileAndRequests:
    def test_profile_hides_password_hash(self, service, user):
        profile = service.get_user_profile(user.id)
        assert profile.email == "ada@example.com"
        assert not hasattr(profile, "password_hash")

    def test_profile_of_missing_user(self, service):
        with pytest.raises(NotFoundError):
            service.get_user_profile(999999)

    def test_authenticate_request_rereads_role(self, service, user, session):
        pair = service.authenticate_user(LoginIn(email=user.email, password=DEFAULT_PASSWORD))
        user.role = "ADMIN"
        session.commit()

        current = service.authenticate_request(pair.access_token)
        assert (current.id, current.email, current.role) == (user.id, "ada@example.com", "ADMIN")

    def test_authorize_accepts_listed_role(self, service):
        admin = CurrentUser(id=1, email="root@example.com", role="ADMIN")
        assert service.authorize(admin, {"ADMIN"}) is admin

    def test_authorize_rejects_other_roles(self, service):
        user = CurrentUser(id=2, email="ada@example.com", role="USER")
        with pytest.raises(AuthorizationError, match="Admin role required"):
            service.authorize(user, {"ADMIN"})

    @pytest.mark.parametrize("token", [None, "", "stub.999"])
    def test_authenticate_request_rejects_bad_tokens(self, service, token):
        with pytest.raises(AuthenticationError, match=INVALID_TOKEN):
            service.authenticate_request(token)


# ------------------------------- Sessions --------------------------------- #
class TestSessions:
    def test_list_and_revoke_all(self, service, user):
        for _ in range(2):
            service.authenticate_user(LoginIn(email=user.email, password=DEFAULT_PASSWORD))

        assert len(service.list_sessions(user.id)) == 2
        assert service.revoke_all_sessions(user.id) == 2
        assert service.list_sessions(user.id) == []

    def test_revoke_all_for_missing_user(self, service):
        with pytest.raises(NotFoundError):
            service.revoke_all_sessions(999999)
