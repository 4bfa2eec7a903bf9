"""AuthService behaviour when the refresh token store fails."""

from __future__ import annotations

import pytest

from tests.helpers.utils import InMemoryUnitOfWork, InMemoryUserRepository
from ticketing.core.security import WerkzeugCredentialVerifier
from ticketing.services._shared.errors import StorageError
from ticketing.services._shared.ports import InMemoryRefreshTokenStore, StubAccessTokenCodec
from ticketing.services.auth.dto import LoginIn, RegisterIn
from ticketing.services.auth.service import AuthService

EMAIL = "fragile@example.com"
PASSWORD = "longenough"


class FlakyRefreshTokenStore(InMemoryRefreshTokenStore):
    """In-memory store whose listed operations raise :class:`StorageError`."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.failing: set[str] = set()

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.failing:
            raise StorageError(f"{operation} unavailable")

    def issue(self, user_id):
        self._maybe_fail("issue")
        return super().issue(user_id)

    def find_owner(self, raw):
        self._maybe_fail("find_owner")
        return super().find_owner(raw)

    def revoke(self, token_id):
        self._maybe_fail("revoke")
        return super().revoke(token_id)


@pytest.fixture()
def store():
    return FlakyRefreshTokenStore(verifier=WerkzeugCredentialVerifier(method="pbkdf2:sha256:1000"))


@pytest.fixture()
def service(store):
    users = InMemoryUserRepository(verifier=store.verifier)
    users.find_or_create(email=EMAIL, password=PASSWORD)
    return AuthService(
        token_codec=StubAccessTokenCodec(),
        refresh_store=store,
        verifier=store.verifier,
        uow_factory=lambda: InMemoryUnitOfWork(users),
    )


def _login(service):
    return service.authenticate_user(LoginIn(email=EMAIL, password=PASSWORD))


def test_login_propagates_issue_failure(service, store):
    store.failing.add("issue")
    with pytest.raises(StorageError):
        _login(service)


def test_register_propagates_issue_failure(service, store):
    store.failing.add("issue")
    with pytest.raises(StorageError):
        service.register_user(RegisterIn(email="new@example.com", password=PASSWORD))


def test_refresh_propagates_lookup_failure(service, store):
    pair = _login(service)
    store.failing.add("find_owner")
    with pytest.raises(StorageError):
        service.refresh_user_tokens(pair.refresh_token)


@pytest.mark.parametrize("operation", ["find_owner", "revoke"])
def test_logout_swallows_store_failures(service, store, operation):
    pair = _login(service)
    store.failing.add(operation)

    assert service.logout_user(pair.refresh_token) is None

    # nothing was revoked, the session is still usable
    store.failing.clear()
    assert len(store.list_active(1)) == 1
