"""Deletion of consumed queue messages."""

from __future__ import annotations

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from core.errors import CsvRelayQueueError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class MessageDeleter:
    """Deletes messages from one queue by receipt handle."""

    def __init__(self, sqs_client: Any, queue_url: str) -> None:
        self._sqs_client = sqs_client
        self._queue_url = queue_url

    def delete(self, receipt_handle: str) -> None:
        """Delete one message.

        Raises:
            CsvRelayQueueError: If the queue refuses the delete.
        """
        try:
            self._sqs_client.delete_message(QueueUrl=self._queue_url, ReceiptHandle=receipt_handle)
        except (BotoCoreError, ClientError) as error:
            _LOGGER.error("message_delete_failed", queue_url=self._queue_url, error=str(error))
            raise CsvRelayQueueError(
                f"Failed to delete message from {self._queue_url}: {error}."
            ) from error
