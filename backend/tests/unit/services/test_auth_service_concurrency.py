"""Concurrent rotation of one refresh token: exactly one caller wins."""

from __future__ import annotations

import threading

from tests.helpers.utils import InMemoryUnitOfWork, InMemoryUserRepository
from ticketing.core.security import WerkzeugCredentialVerifier
from ticketing.services._shared.errors import AuthenticationError
from ticketing.services._shared.ports import InMemoryRefreshTokenStore, StubAccessTokenCodec
from ticketing.services.auth.dto import LoginIn
from ticketing.services.auth.service import AuthService

WORKERS = 6


def _service() -> tuple[AuthService, InMemoryRefreshTokenStore]:
    verifier = WerkzeugCredentialVerifier(method="pbkdf2:sha256:1000")
    users = InMemoryUserRepository(verifier=verifier)
    users.find_or_create(email="race@example.com", password="longenough")
    store = InMemoryRefreshTokenStore(verifier=verifier)
    service = AuthService(
        token_codec=StubAccessTokenCodec(),
        refresh_store=store,
        verifier=verifier,
        uow_factory=lambda: InMemoryUnitOfWork(users),
    )
    return service, store


def test_only_one_concurrent_refresh_succeeds():
    service, store = _service()
    pair = service.authenticate_user(LoginIn(email="race@example.com", password="longenough"))

    barrier = threading.Barrier(WORKERS)
    outcomes: list[str] = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        try:
            service.refresh_user_tokens(pair.refresh_token)
            outcome = "ok"
        except AuthenticationError:
            outcome = "rejected"
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=worker) for _ in range(WORKERS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("rejected") == WORKERS - 1
    # only the single successor stays active
    assert len(store.list_active(1)) == 1
    assert store.get(1).revoked_at is not None


def test_in_memory_wiring_supports_full_flow():
    service, store = _service()
    pair = service.authenticate_user(LoginIn(email="RACE@example.com", password="longenough"))

    assert service.authenticate_request(pair.access_token).email == "race@example.com"
    service.logout_user(pair.refresh_token)
    assert store.list_active(1) == []
