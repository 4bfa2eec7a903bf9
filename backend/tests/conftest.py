"""Pytest fixtures: session-wide app, in-memory SQLite, one SAVEPOINT per test.

Each test runs inside a transaction that is rolled back at teardown, so rows
created by factories or by the code under test never leak between cases.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from ticketing.core.config import TestingConfig
from ticketing.core.extensions import db as _db
from ticketing.factory import create_app


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - In-memory SQLite shared through a single connection.
    - Cheap password hashing and a fixed signing secret.
    - Refresh cookie settings left at their defaults so tests assert them.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "WARNING"
    ACCESS_TOKEN_TTL_MINUTES = 15
    REFRESH_TTL_DAYS = 30


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once for the whole run."""
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create tables once for the whole run."""
    with app.app_context():
        _db.create_all()
    yield _db
    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(app, db):
    """Dedicated connection shared by every per-test transaction."""
    with app.app_context():
        conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Scoped session bound to ``connection`` inside a SAVEPOINT.

    ``db.session`` is swapped for this session, so repositories, units of
    work and request handlers all see the same transaction. Tests may call
    ``session.commit()``; everything is still discarded at teardown.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(bind=connection, future=True, autoflush=False, expire_on_commit=False)
    scoped = scoped_session(SessionFactory)

    nested = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    original_session = db.session
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture()
def client(app, session):
    """Flask test client running against the per-test session."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Seeded :class:`faker.Faker` instance."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture(autouse=True)
def _factories_session(session):
    """Point Factory Boy at the per-test session."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


@pytest.fixture(autouse=True)
def _app_context(request, app):
    """Fresh application context per test.

    Tests using ``client`` run without one, so every request pushes its own
    context and starts from an empty ``g``.
    """
    if "client" in request.fixturenames:
        yield None
        return
    with app.app_context() as ctx:
        yield ctx
