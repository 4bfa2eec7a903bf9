"""Generic SQLAlchemy 2.x repository base.

Repositories are persistence-only: they stage, flush and query, and never
commit or roll back. The Unit of Work around them owns the transaction.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar, cast

from sqlalchemy.orm import Session

from ticketing.core.extensions import db

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Session access and primary-key helpers shared by every repository.

    Subclasses set :attr:`model` to their mapped class.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """Injected session, falling back to the Flask-scoped ``db.session``."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key is populated.

        :param instance: New entity.
        :type instance: E
        :returns: The same instance.
        :rtype: E
        """
        self.session.add(instance)
        self.flush()
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Return the entity with primary key ``entity_id``, or ``None``."""
        return self.session.get(self.model, entity_id)

    def flush(self) -> None:
        self.session.flush()
