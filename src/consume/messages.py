"""SQS delivery decoding.

This module turns Lambda SQS records into typed queue records and
enforces that one invocation carries a single environment.
"""

from __future__ import annotations

import json
from typing import Any, Mapping

from core.errors import CsvRelayEventError
from core.types import QueueRecord


def parse_queue_records(event: Mapping[str, Any]) -> list[QueueRecord]:
    """Decode every record of an SQS event.

    Args:
        event: Lambda SQS event payload.

    Returns:
        Decoded records in delivery order.

    Raises:
        CsvRelayEventError: If there are no records or a body is invalid.
    """
    raw_records = event.get("Records") or []
    if not raw_records:
        raise CsvRelayEventError("No records to process")
    return [_parse_queue_record(raw_record) for raw_record in raw_records]


def require_single_environment(records: list[QueueRecord]) -> str:
    """Return the environment shared by all records.

    Args:
        records: Decoded records of one invocation.

    Returns:
        The common environment tag.

    Raises:
        CsvRelayEventError: If records span more than one environment.
    """
    environments = sorted({record.env for record in records})
    if len(environments) != 1:
        raise CsvRelayEventError(
            f"Mixed environments in one delivery: {', '.join(environments)}. "
            "Publish each environment to its own queue."
        )
    return environments[0]


def _parse_queue_record(raw_record: Mapping[str, Any]) -> QueueRecord:
    message_id = raw_record.get("messageId", "")
    try:
        payload = json.loads(raw_record["body"])
    except (KeyError, TypeError, json.JSONDecodeError) as error:
        raise CsvRelayEventError(
            f"Invalid message {message_id}: body is missing or not JSON ({error})."
        ) from error
    if not isinstance(payload, dict):
        raise CsvRelayEventError(f"Invalid message {message_id}: body must be a JSON object.")
    env = payload.get("env")
    data = payload.get("data")
    if not isinstance(env, str) or not env or not isinstance(data, dict):
        raise CsvRelayEventError(
            f"Invalid message {message_id}: expected string 'env' and object 'data'."
        )
    receipt_handle = raw_record.get("receiptHandle")
    if not receipt_handle:
        raise CsvRelayEventError(f"Invalid message {message_id}: missing receiptHandle.")
    return QueueRecord(
        message_id=message_id,
        receipt_handle=receipt_handle,
        env=env,
        data=data,
    )
