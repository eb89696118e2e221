"""Consumer orchestration for one SQS delivery.

This module fans decoded records out over the windowed worker pool
and reports per-record outcomes.
"""

from __future__ import annotations

from consume.record_processor import RecordProcessor
from consume.worker_pool import BoundedWorkerPool
from core.logging_config import get_logger
from core.types import ConsumeReport, QueueRecord

_LOGGER = get_logger(__name__)


def consume_records(
    records: list[QueueRecord],
    processor: RecordProcessor,
    pool: BoundedWorkerPool | None = None,
) -> ConsumeReport:
    """Process records window by window and collect their outcomes.

    Records committed before a failure stay committed; failed and
    skipped records keep their messages on the queue.

    Args:
        records: Decoded records of one delivery.
        processor: Transactional per-record processor.
        pool: Worker pool; defaults to the fixed concurrency limit.

    Returns:
        Per-record outcomes and the number of skipped records.
    """
    worker_pool = pool or BoundedWorkerPool()
    report = worker_pool.run(records, processor.process, _message_id)
    for outcome in report.outcomes:
        if not outcome.succeeded:
            _LOGGER.warning(
                "record_left_on_queue", message_id=outcome.message_id, error=outcome.error
            )
    _LOGGER.info(
        "consume_completed",
        record_count=len(records),
        succeeded_count=report.succeeded_count,
        failed_count=report.failed_count,
        skipped_count=report.skipped_count,
    )
    return report


def _message_id(record: QueueRecord) -> str:
    return record.message_id
