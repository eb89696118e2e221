"""Ingest orchestration for uploaded CSV objects.

This module coordinates object download, row parsing, batching and
queue publishing for a single upload notification.
"""

from __future__ import annotations

from typing import Any

from core.logging_config import get_logger
from core.types import IngestSummary, ObjectLocation
from ingest.batching import iter_batches
from ingest.csv_reader import fetch_object_text, parse_rows
from ingest.queue_publisher import QueuePublisher

_LOGGER = get_logger(__name__)


def ingest_upload(
    location: ObjectLocation,
    env: str,
    s3_client: Any,
    publisher: QueuePublisher,
) -> IngestSummary:
    """Publish every row of an uploaded CSV object to the queue.

    Rows are sent in file order, ten per batch, with the final batch
    holding the remainder. Empty and header-only files send nothing.

    Args:
        location: Uploaded bucket and key.
        env: Environment tag for the message envelopes.
        s3_client: Boto3 S3 client.
        publisher: Queue publisher bound to the FIFO queue.

    Returns:
        Counts of rows read and batches sent.

    Raises:
        CsvRelayIngestError: If the object cannot be read or parsed.
        CsvRelayQueueError: If a batch send fails.
    """
    text = fetch_object_text(s3_client, location)
    row_count = 0
    batch_count = 0
    for batch in iter_batches(parse_rows(text)):
        batch_count += 1
        row_count += len(batch)
        _LOGGER.info("sending_chunk", chunk=batch_count, row_count=len(batch))
        publisher.send_batch(batch, env)
    _log_ingest_completion(location, env, row_count, batch_count)
    return IngestSummary(env=env, row_count=row_count, batch_count=batch_count)


def _log_ingest_completion(
    location: ObjectLocation,
    env: str,
    row_count: int,
    batch_count: int,
) -> None:
    """Log pipeline completion with contextual metadata."""
    _LOGGER.info(
        "ingest_completed",
        bucket=location.bucket,
        key=location.key,
        env=env,
        row_count=row_count,
        batch_count=batch_count,
    )
