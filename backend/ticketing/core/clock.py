"""UTC clock helpers shared by models, stores and services."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current timezone-aware UTC time."""
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from SQLite.

    :param value: Datetime as loaded from the database or built in code.
    :type value: datetime.datetime
    :returns: Timezone-aware datetime in UTC.
    :rtype: datetime.datetime
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
