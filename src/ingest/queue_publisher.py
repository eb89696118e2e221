"""FIFO queue publisher for row batches.

This module wraps ``send_message_batch`` and turns rejected entries
into domain errors so a partial send fails the ingestion run.
"""

from __future__ import annotations

import time
from typing import Any, Callable

from botocore.exceptions import BotoCoreError, ClientError

from core.errors import CsvRelayQueueError
from core.logging_config import get_logger
from core.types import Row
from ingest.batching import build_batch_entries

_LOGGER = get_logger(__name__)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class QueuePublisher:
    """Sends row batches to one FIFO queue."""

    def __init__(
        self,
        sqs_client: Any,
        queue_url: str,
        clock_ms: Callable[[], int] = _epoch_millis,
    ) -> None:
        self._sqs_client = sqs_client
        self._queue_url = queue_url
        self._clock_ms = clock_ms

    def send_batch(self, rows: list[Row], env: str) -> int:
        """Send one batch of rows as a single ``send_message_batch`` call.

        Args:
            rows: Up to ten rows.
            env: Environment tag for the message envelopes.

        Returns:
            Number of entries accepted by the queue.

        Raises:
            CsvRelayQueueError: If the call fails or any entry is rejected.
        """
        entries = build_batch_entries(rows, env, self._clock_ms())
        try:
            response = self._sqs_client.send_message_batch(
                QueueUrl=self._queue_url, Entries=entries
            )
        except (BotoCoreError, ClientError) as error:
            _LOGGER.error("batch_send_failed", queue_url=self._queue_url, error=str(error))
            raise CsvRelayQueueError(
                f"Failed to send batch of {len(entries)} message(s) to {self._queue_url}: "
                f"{error}. Check the queue URL and send permissions."
            ) from error
        failed = response.get("Failed") or []
        if failed:
            _LOGGER.error(
                "batch_entries_rejected",
                queue_url=self._queue_url,
                failed_count=len(failed),
                first_failure=failed[0].get("Message"),
            )
            raise CsvRelayQueueError(
                f"Queue rejected {len(failed)} of {len(entries)} message(s): "
                f"{failed[0].get('Code')} {failed[0].get('Message')}."
            )
        accepted = len(response.get("Successful") or entries)
        _LOGGER.info("batch_sent", queue_url=self._queue_url, entry_count=accepted, env=env)
        return accepted
