"""Pooled MySQL access for the consumer.

This module builds the per-invocation SQLAlchemy engine and renders
the users upsert for the connected dialect.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping
import re
import uuid

from sqlalchemy import create_engine
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.pool import QueuePool

from core.constants import DB_POOL_SIZE, MYSQL_DRIVER_NAME
from core.errors import CsvRelayDatabaseError
from core.types import DatabaseConfig, UserRow
from consume.users_table import users_table

# Any punctuation may separate date and time parts in MySQL literals.
_MYSQL_DATETIME = re.compile(
    r"^(\d{4})[^\w\s](\d{1,2})[^\w\s](\d{1,2})"
    r"(?:[T ](\d{1,2})[^\w\s](\d{1,2})[^\w\s](\d{1,2})(?:\.(\d{1,6}))?)?$"
)


def create_engine_for(config: DatabaseConfig, pool_size: int = DB_POOL_SIZE) -> Engine:
    """Create an engine whose pool holds at most ``pool_size`` connections.

    Checkouts beyond the pool size wait without a timeout. The caller
    owns the engine and must ``dispose()`` it.

    Args:
        config: Resolved connection settings.
        pool_size: Maximum concurrent connections.

    Returns:
        SQLAlchemy engine backed by PyMySQL.
    """
    url = URL.create(
        MYSQL_DRIVER_NAME,
        username=config.user,
        password=config.password,
        host=config.host,
        port=config.port,
        database=config.database,
    )
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=0,
        pool_timeout=None,
    )


def to_user_row(data: Mapping[str, Any], now: Callable[[], datetime]) -> UserRow:
    """Extract the users columns from a queued row.

    A missing or blank ``timestamp`` falls back to ``now()``. ISO-8601
    values and MySQL datetime literals such as ``2024/01/01 09:00:00``
    are accepted. Timestamps are normalized to naive UTC.

    Raises:
        CsvRelayDatabaseError: If ``name`` is missing or the timestamp
            cannot be parsed.
    """
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise CsvRelayDatabaseError("Row has no 'name' value; cannot upsert user.")
    raw_timestamp = data.get("timestamp")
    if raw_timestamp is None or not str(raw_timestamp).strip():
        return UserRow(name=name, timestamp=_naive_utc(now()))
    try:
        parsed = _parse_timestamp(str(raw_timestamp).strip())
    except ValueError as error:
        raise CsvRelayDatabaseError(
            f"Invalid timestamp '{raw_timestamp}' for user '{name}': "
            "expected ISO-8601 or a MySQL datetime literal."
        ) from error
    return UserRow(name=name, timestamp=_naive_utc(parsed))


def new_user_id() -> str:
    """Return a fresh primary key for the users table."""
    return str(uuid.uuid4())


def upsert_user(
    connection: Connection,
    user: UserRow,
    id_factory: Callable[[], str] = new_user_id,
) -> None:
    """Insert a user or, on a key conflict, refresh only ``updatedAt``.

    Args:
        connection: Connection with an open transaction.
        user: Row to write.
        id_factory: Generator of new primary keys.

    Raises:
        CsvRelayDatabaseError: If the dialect has no upsert support here.
    """
    values = {
        "id": id_factory(),
        "name": user.name,
        "createdAt": user.timestamp,
        "updatedAt": user.timestamp,
    }
    dialect_name = connection.dialect.name
    if dialect_name == "mysql":
        statement = mysql_insert(users_table).values(**values)
        statement = statement.on_duplicate_key_update(updatedAt=statement.inserted.updatedAt)
    elif dialect_name == "sqlite":
        statement = sqlite_insert(users_table).values(**values)
        statement = statement.on_conflict_do_update(
            index_elements=[users_table.c.name],
            set_={"updatedAt": statement.excluded.updatedAt},
        )
    else:
        raise CsvRelayDatabaseError(f"Unsupported database dialect '{dialect_name}' for upsert.")
    connection.execute(statement)


def _parse_timestamp(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        match = _MYSQL_DATETIME.match(value)
        if match is None:
            raise
    year, month, day, hour, minute, second, fraction = match.groups()
    return datetime(
        int(year),
        int(month),
        int(day),
        int(hour or 0),
        int(minute or 0),
        int(second or 0),
        int((fraction or "0").ljust(6, "0")),
    )


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
