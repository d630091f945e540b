"""Single periodic task driving the lifecycle manager."""

from __future__ import annotations

import asyncio
import logging

from theatre_pos.lifecycle.manager import LifecycleResult, ReportLifecycleManager

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 900.0


class DailyReportTask:
    """Runs :meth:`ReportLifecycleManager.run_daily` on start and then every
    ``interval_seconds``.

    A run that is still in progress when the next one is due is not
    overlapped: the later call returns immediately.
    """

    def __init__(
        self,
        manager: ReportLifecycleManager,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.manager = manager
        self.interval_seconds = interval_seconds
        self._running = False
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def run_once(self) -> LifecycleResult | None:
        """Run the daily check now, None if a run is already in progress."""
        if self._running:
            logger.debug("Lifecycle run already in progress, skipping")
            return None
        self._running = True
        try:
            result = await self.manager.run_daily()
        finally:
            self._running = False
        if not result.ok:
            logger.warning(f"Lifecycle run for {result.business_date} had errors: {result.errors}")
        return result

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> asyncio.Task:
        """Schedule the loop on the running event loop."""
        if self._task is not None and not self._task.done():
            return self._task
        self._task = asyncio.create_task(self._loop(), name="daily-report-lifecycle")
        logger.info(f"Started daily report task (every {self.interval_seconds:.0f}s)")
        return self._task

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Stopped daily report task")
