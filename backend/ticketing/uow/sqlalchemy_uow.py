"""
SQLAlchemy Units of Work over the Flask-scoped session.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction, scoped_session

from ticketing.core.extensions import db
from ticketing.repositories import RefreshTokenRepository, UserRepository
from ticketing.uow.base import UnitOfWork

log = logging.getLogger(__name__)

WRITE_KEYWORDS = (
    "insert",
    "update",
    "delete",
    "merge",
    "replace",
    "create",
    "alter",
    "drop",
    "truncate",
    "grant",
    "revoke",
)


def current_session() -> Session:
    """Return the concrete :class:`Session` behind ``db.session`` for this thread."""
    proxy = db.session
    if isinstance(proxy, scoped_session):
        return proxy()
    return proxy


class _Repositories:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.refresh_tokens = RefreshTokenRepository(session=session)


class SQLAlchemyUnitOfWork(_Repositories, UnitOfWork):
    """
    Read-write scope: commit on clean exit, roll back when the block raises.

    The refresh token store writes through the same session, so a rotation
    (revoke old, insert new) is committed or discarded as a whole.
    """

    def __init__(self) -> None:
        super().__init__(current_session())

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except SQLAlchemyError:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(_Repositories, UnitOfWork):
    """
    Read-only scope that rejects every write and always rolls back.

    Guards are installed on this thread's session (ORM flushes) and on its
    connection (raw DML/DDL). When the scope opens its own transaction on
    PostgreSQL or MySQL it also issues ``SET TRANSACTION`` directives; on
    SQLite the guards alone apply.

    Parameters
    ----------
    isolation_level:
        Isolation level hint such as ``"READ COMMITTED"``; ``None`` keeps the
        connection default.
    enforce_db_readonly:
        Emit ``SET TRANSACTION READ ONLY`` where supported.
    """

    _DIRECTIVE_DIALECTS = ("postgresql", "mysql", "mariadb")

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(current_session())
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._owned: SessionTransaction | None = None
        self._conn: Connection | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # attach to a running transaction instead of nesting one
        self._owned = None if self.session.in_transaction() else self.session.begin()
        self._conn = self.session.connection()

        event.listen(self.session, "before_flush", self._block_flush)
        event.listen(self._conn, "before_cursor_execute", self._block_statement)

        if self._owned is not None and self._conn.dialect.name in self._DIRECTIVE_DIALECTS:
            self._apply_directives()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned is not None:
                self.rollback()
        finally:
            with suppress(InvalidRequestError):
                event.remove(self.session, "before_flush", self._block_flush)
            if self._conn is not None:
                with suppress(InvalidRequestError):
                    event.remove(self._conn, "before_cursor_execute", self._block_statement)
            self._owned = None
            self._conn = None

    def commit(self) -> None:
        """
        Refuse to commit.

        :raises RuntimeError: Always.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    def _apply_directives(self) -> None:
        try:
            if self.isolation_level:
                level = self.isolation_level.upper().strip()
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            log.warning("uow.readonly.directives_failed: %s", exc)

    @staticmethod
    def _block_flush(session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked")

    @staticmethod
    def _block_statement(conn, cursor, statement, parameters, context, executemany) -> None:
        keyword = statement.lstrip().split(None, 1)[0].lower() if statement else ""
        if keyword in WRITE_KEYWORDS:
            raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {keyword.upper()}")
