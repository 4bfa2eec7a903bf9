"""Unit tests for UserRepository."""

from __future__ import annotations

import pytest

from tests.factories.user import UserFactory
from ticketing.core.security import verify_secret
from ticketing.models.user import UserRole
from ticketing.repositories.user import UserRepository, normalize_email


class TestUserRepository:
    @pytest.fixture()
    def repo(self):
        return UserRepository()

    def test_get_by_email_is_case_insensitive(self, repo, session):
        u = UserFactory(email="alice@example.com")
        session.commit()

        fetched = repo.get_by_email("  ALICE@Example.COM ")
        assert fetched is not None
        assert fetched.id == u.id

    def test_exists_by_email(self, repo, session):
        UserFactory(email="bob@example.com")
        session.commit()

        assert repo.exists_by_email("Bob@example.com")
        assert not repo.exists_by_email("nonexistent@example.com")

    def test_find_or_create_creates_once(self, repo, session):
        user, created = repo.find_or_create(
            email="New@Example.com", password="longenough", first_name="Ada"
        )
        assert created is True
        assert user.id is not None
        assert user.email == "new@example.com"
        assert verify_secret("longenough", user.password_hash)

        again, created_again = repo.find_or_create(email="new@example.com", password="other-pass")
        assert created_again is False
        assert again.id == user.id
        assert verify_secret("longenough", again.password_hash)

    def test_set_role(self, repo, session):
        u = UserFactory()
        repo.set_role(u, "ADMIN")
        session.commit()
        assert repo.get(u.id).role is UserRole.ADMIN


def test_normalize_email():
    assert normalize_email("  Mixed@Case.Org ") == "mixed@case.org"
