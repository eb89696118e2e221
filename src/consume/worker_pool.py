"""Windowed worker pool for record processing.

Records run in windows of at most ``window_size`` concurrent tasks and
windows run one after another. Every started task yields an outcome; a
window with any failure stops later windows from starting.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Sequence, TypeVar

from core.constants import CONCURRENCY_LIMIT
from core.logging_config import get_logger
from core.types import ConsumeReport, RecordOutcome

_LOGGER = get_logger(__name__)

ItemT = TypeVar("ItemT")


class BoundedWorkerPool:
    """Runs tasks in sequential windows of bounded concurrency."""

    def __init__(self, window_size: int = CONCURRENCY_LIMIT) -> None:
        if window_size < 1:
            raise ValueError(f"window_size must be positive, got {window_size}")
        self._window_size = window_size

    @property
    def window_size(self) -> int:
        return self._window_size

    def run(
        self,
        items: Sequence[ItemT],
        task: Callable[[ItemT], None],
        item_key: Callable[[ItemT], str],
    ) -> ConsumeReport:
        """Run ``task`` for every item and collect per-item outcomes.

        Args:
            items: Work items in processing order.
            task: Callable that raises on failure.
            item_key: Identifier recorded in each outcome.

        Returns:
            Outcomes of started items plus the count never started.
        """
        outcomes: list[RecordOutcome] = []
        with ThreadPoolExecutor(max_workers=self._window_size) as executor:
            for start in range(0, len(items), self._window_size):
                window = items[start : start + self._window_size]
                futures = [executor.submit(task, item) for item in window]
                window_outcomes = [
                    _collect_outcome(item_key(item), future)
                    for item, future in zip(window, futures)
                ]
                outcomes.extend(window_outcomes)
                if any(not outcome.succeeded for outcome in window_outcomes):
                    skipped_count = len(items) - (start + len(window))
                    if skipped_count:
                        _LOGGER.warning(
                            "remaining_windows_skipped",
                            window_start=start,
                            skipped_count=skipped_count,
                        )
                    return ConsumeReport(outcomes=tuple(outcomes), skipped_count=skipped_count)
        return ConsumeReport(outcomes=tuple(outcomes))


def _collect_outcome(key: str, future: Future) -> RecordOutcome:
    try:
        future.result()
    except Exception as error:
        return RecordOutcome(message_id=key, succeeded=False, error=str(error))
    return RecordOutcome(message_id=key, succeeded=True)
