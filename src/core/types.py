"""Shared typed models.

This module defines immutable data models used by the ingest and
consume stages to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict

from core.constants import DEFAULT_DB_PORT

Row = Dict[str, str]


@dataclass(frozen=True)
class ObjectLocation:
    """Uploaded object identified by an S3 notification.

    Attributes:
        bucket: Source bucket name.
        key: URL-decoded object key.
    """

    bucket: str
    key: str


@dataclass(frozen=True)
class IngestSummary:
    """Outcome of one ingestion run.

    Attributes:
        env: Environment tag attached to every message.
        row_count: Number of parsed data rows.
        batch_count: Number of batch-send calls issued.
    """

    env: str
    row_count: int
    batch_count: int


@dataclass(frozen=True)
class DatabaseConfig:
    """Resolved MySQL connection settings for one environment."""

    host: str
    user: str
    password: str = field(repr=False)
    database: str
    port: int = DEFAULT_DB_PORT


@dataclass(frozen=True)
class QueueRecord:
    """Decoded SQS delivery.

    Attributes:
        message_id: Broker-assigned message id.
        receipt_handle: Token required to delete the message.
        env: Environment tag from the message envelope.
        data: Row payload from the message envelope.
    """

    message_id: str
    receipt_handle: str
    env: str
    data: Row


@dataclass(frozen=True)
class UserRow:
    """Row fields written to the users table."""

    name: str
    timestamp: datetime


@dataclass(frozen=True)
class RecordOutcome:
    """Per-record result of the consumer worker pool.

    Attributes:
        message_id: Message id of the processed record.
        succeeded: Whether the upsert committed and the message was deleted.
        error: Failure description when ``succeeded`` is false.
    """

    message_id: str
    succeeded: bool
    error: str | None = None


@dataclass(frozen=True)
class ConsumeReport:
    """Aggregated consumer results for one invocation.

    Attributes:
        outcomes: Outcomes of every record that was started.
        skipped_count: Records never started because an earlier window failed.
    """

    outcomes: tuple[RecordOutcome, ...]
    skipped_count: int = 0

    @property
    def succeeded_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.succeeded)

    @property
    def all_succeeded(self) -> bool:
        return self.failed_count == 0 and self.skipped_count == 0
