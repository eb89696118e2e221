"""Row batching and queue entry encoding.

This module groups parsed rows into fixed-size batches and renders
each batch as SQS ``send_message_batch`` entries.
"""

from __future__ import annotations

import json
from typing import Iterable, Iterator

from core.constants import CHUNK_SIZE, DEDUP_ID_PREFIX, ENTRY_ID_PREFIX, MESSAGE_GROUP_ID
from core.types import Row


def iter_batches(rows: Iterable[Row], size: int = CHUNK_SIZE) -> Iterator[list[Row]]:
    """Group rows into consecutive batches of at most ``size`` rows.

    Args:
        rows: Parsed rows in file order.
        size: Maximum rows per batch.

    Yields:
        Full batches, then one final partial batch when rows remain.
    """
    buffer: list[Row] = []
    for row in rows:
        buffer.append(row)
        if len(buffer) == size:
            yield buffer
            buffer = []
    if buffer:
        yield buffer


def encode_message_body(row: Row, env: str) -> str:
    """Render the ``{"data": ..., "env": ...}`` envelope as compact JSON."""
    return json.dumps({"data": row, "env": env}, separators=(",", ":"), ensure_ascii=False)


def build_batch_entries(rows: list[Row], env: str, now_ms: int) -> list[dict[str, str]]:
    """Build FIFO batch entries for one batch of rows.

    Args:
        rows: Rows of a single batch.
        env: Environment tag embedded in every message body.
        now_ms: Epoch milliseconds shared by the entries of this batch.

    Returns:
        Entries carrying id, body, group id and deduplication id.
    """
    entries: list[dict[str, str]] = []
    for index, row in enumerate(rows):
        dedup_key = row.get("id") or str(index)
        entries.append(
            {
                "Id": f"{ENTRY_ID_PREFIX}-{index}-{now_ms}",
                "MessageBody": encode_message_body(row, env),
                "MessageGroupId": MESSAGE_GROUP_ID,
                "MessageDeduplicationId": f"{DEDUP_ID_PREFIX}-{dedup_key}-{now_ms}",
            }
        )
    return entries
