"""Transactional processing of a single queued row.

Order inside the transaction: upsert the user, delete the message,
commit. Any failure rolls back and keeps the message for redelivery.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from consume.database import new_user_id, to_user_row, upsert_user
from consume.message_deleter import MessageDeleter
from core.errors import CsvRelayDatabaseError, CsvRelayError
from core.logging_config import get_logger
from core.types import QueueRecord

_LOGGER = get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecordProcessor:
    """Applies queue records to the users table."""

    def __init__(
        self,
        engine: Engine,
        deleter: MessageDeleter,
        now: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = new_user_id,
    ) -> None:
        self._engine = engine
        self._deleter = deleter
        self._now = now
        self._id_factory = id_factory

    def process(self, record: QueueRecord) -> None:
        """Upsert the record's user and delete its message in one transaction.

        The pooled connection is returned on every path.

        Raises:
            CsvRelayDatabaseError: If the row is invalid or the database fails.
            CsvRelayQueueError: If the message delete fails.
        """
        try:
            user = to_user_row(record.data, self._now)
            with self._engine.connect() as connection:
                with connection.begin():
                    upsert_user(connection, user, self._id_factory)
                    self._deleter.delete(record.receipt_handle)
        except SQLAlchemyError as error:
            _LOGGER.error("record_failed", message_id=record.message_id, error=str(error))
            raise CsvRelayDatabaseError(
                f"Failed to upsert message {record.message_id}: {error}"
            ) from error
        except CsvRelayError as error:
            _LOGGER.error("record_failed", message_id=record.message_id, error=str(error))
            raise
        _LOGGER.info("record_committed", message_id=record.message_id)
