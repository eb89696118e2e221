"""Unit tests for the windowed worker pool."""

from __future__ import annotations

import threading
import time

import pytest

from consume.worker_pool import BoundedWorkerPool


class _ConcurrencyProbe:
    def __init__(self) -> None:
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def __call__(self, item: int) -> None:
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        time.sleep(0.01)
        with self._lock:
            self.active -= 1


def test_run_reports_every_item_on_success() -> None:
    """All items should yield successful outcomes in order."""
    pool = BoundedWorkerPool(window_size=10)

    report = pool.run(list(range(25)), lambda item: None, str)

    assert [outcome.message_id for outcome in report.outcomes] == [str(n) for n in range(25)]
    assert report.all_succeeded and report.succeeded_count == 25


def test_run_never_exceeds_window_size() -> None:
    """Concurrent tasks should be bounded by the window size."""
    probe = _ConcurrencyProbe()

    BoundedWorkerPool(window_size=3).run(list(range(10)), probe, str)

    assert 1 <= probe.peak <= 3


def test_run_stops_after_failed_window() -> None:
    """A failure should finish its window and skip the later windows."""
    started: list[int] = []
    lock = threading.Lock()

    def _task(item: int) -> None:
        with lock:
            started.append(item)
        if item == 2:
            raise RuntimeError("boom")

    report = BoundedWorkerPool(window_size=4).run(list(range(10)), _task, str)

    assert sorted(started) == [0, 1, 2, 3]
    assert report.failed_count == 1 and report.succeeded_count == 3
    assert report.skipped_count == 6
    assert report.outcomes[2].error == "boom"


def test_run_failure_in_last_window_skips_nothing() -> None:
    """A failing final window should report no skipped items."""

    def _task(item: int) -> None:
        if item == 9:
            raise ValueError("last")

    report = BoundedWorkerPool(window_size=5).run(list(range(10)), _task, str)

    assert report.skipped_count == 0 and not report.all_succeeded


def test_window_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        BoundedWorkerPool(window_size=0)
