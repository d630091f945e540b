"""Tests for the periodic lifecycle task."""

import asyncio
from datetime import datetime

import pytest

from theatre_pos.lifecycle import DailyReportTask, InMemoryStore, ReportLifecycleManager
from theatre_pos.lifecycle.manager import LifecycleResult


class SlowManager:
    """Stand-in manager whose run takes a while."""

    def __init__(self, errors: list[str] | None = None) -> None:
        self.calls = 0
        self.errors = errors or []

    async def run_daily(self) -> LifecycleResult:
        self.calls += 1
        await asyncio.sleep(0.01)
        return LifecycleResult(business_date="2025-01-15", errors=list(self.errors))


@pytest.mark.asyncio
async def test_overlapping_runs_are_skipped() -> None:
    """Test that a second run while one is in progress does nothing."""
    manager = SlowManager()
    task = DailyReportTask(manager)

    first, second = await asyncio.gather(task.run_once(), task.run_once())

    assert isinstance(first, LifecycleResult)
    assert second is None
    assert manager.calls == 1
    assert task.is_running is False


@pytest.mark.asyncio
async def test_sequential_runs_both_execute() -> None:
    manager = SlowManager(errors=["snapshot: disk full"])
    task = DailyReportTask(manager)

    await task.run_once()
    result = await task.run_once()

    assert manager.calls == 2
    assert result.ok is False


@pytest.mark.asyncio
async def test_start_and_stop() -> None:
    manager = SlowManager()
    task = DailyReportTask(manager, interval_seconds=3600)

    handle = task.start()
    assert task.start() is handle
    await asyncio.sleep(0.05)
    await task.stop()
    await task.stop()

    assert manager.calls == 1
    assert handle.done()


def test_invalid_interval() -> None:
    with pytest.raises(ValueError):
        DailyReportTask(SlowManager(), interval_seconds=0)


@pytest.mark.asyncio
async def test_run_once_with_real_manager() -> None:
    store = InMemoryStore()
    manager = ReportLifecycleManager(store, clock=lambda: datetime(2025, 1, 15, 20, 0))
    task = DailyReportTask(manager)

    result = await task.run_once()

    assert result.ok
    assert store.data["last_nightly_process_date"] == b"2025-01-15"
