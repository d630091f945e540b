"""Report lifecycle manager.

Once per elapsed business day the manager snapshots the last processed day's
report into the store, and separately prunes orders and snapshots older than
the retention window. Two durable markers drive it:

- ``last_nightly_process_date``: business date of the last snapshot run.
- ``last_auto_clean_date``: business date of the last cleanup.

A marker only advances after the work it stands for has been written, so a
failed run is retried on the next invocation. Runs are serialized by a lock,
and running twice on the same business date is a no-op. Nothing here raises
into the host application: failures are logged, recorded under
``last_lifecycle_error`` and returned in the :class:`LifecycleResult`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from theatre_pos.api import NightlyReportResult, generate_nightly_report
from theatre_pos.calendar import business_date_of, retention_cutoff
from theatre_pos.config import ReportSettings, StorageKeys
from theatre_pos.exceptions import PersistenceError
from theatre_pos.lifecycle.records import RunRecord, write_record
from theatre_pos.lifecycle.store import (
    KeyValueStore,
    OrderRepository,
    get_json,
    get_text,
    set_json,
    set_text,
)
from theatre_pos.orders.categories import DEFAULT_TICKET_CATEGORIES
from theatre_pos.reports.aggregate import aggregate
from theatre_pos.reports.models import NightlyReport
from theatre_pos.reports.weekly import WeeklyTotals, week_bounds, weekly_totals

logger = logging.getLogger(__name__)


@dataclass
class LifecycleResult:
    """Outcome of one :meth:`ReportLifecycleManager.run_daily` call.

    Attributes:
        business_date: Current business date when the run started.
        processed: True if the daily snapshot transition ran to completion.
        snapshot_date: Business date whose report was saved, if any.
        cleaned: True if the retention cleanup ran to completion.
        cleared_orders: Orders removed from the live log.
        removed_reports: Snapshot dates deleted.
        errors: One message per failed stage.
    """

    business_date: str
    processed: bool = False
    snapshot_date: str | None = None
    cleaned: bool = False
    cleared_orders: int = 0
    removed_reports: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class ReportLifecycleManager:
    """Snapshots and prunes nightly reports over a key-value store.

    Example:
        >>> store = DirectoryStore("data/pos_state")
        >>> manager = ReportLifecycleManager(store)
        >>> result = await manager.run_daily()
        >>> result.snapshot_date
        '2025-01-15'

    """

    def __init__(
        self,
        store: KeyValueStore,
        orders: OrderRepository | None = None,
        *,
        settings: ReportSettings | None = None,
        keys: StorageKeys | None = None,
        clock: Callable[[], datetime] = datetime.now,
        is_ticket_category: Callable[[str], bool] = DEFAULT_TICKET_CATEGORIES,
        tz: tzinfo | None = None,
    ) -> None:
        self.settings = settings or ReportSettings()
        self.keys = keys or StorageKeys()
        self.store = store
        self.orders = orders or OrderRepository(store, self.keys.orders)
        self._clock = clock
        self._is_ticket_category = is_ticket_category
        self._tz = tz
        self._lock = asyncio.Lock()

    def today(self) -> str:
        """Current business date according to the clock."""
        return business_date_of(self._clock(), self.settings.cutoff_hour, self._tz)

    async def run_daily(self) -> LifecycleResult:
        """Run the snapshot transition and the retention cleanup if due."""
        async with self._lock:
            today = self.today()
            result = LifecycleResult(business_date=today)

            # other writers may have appended since the last run
            try:
                await self.orders.load()
            except Exception as e:
                await self._fail(result, "load", today, e)
                return result

            await self._process_previous_day(today, result)
            await self._clean_old_data(today, result)
            return result

    # ------------------------------------------------------------------ #
    # Daily snapshot
    # ------------------------------------------------------------------ #

    async def _process_previous_day(self, today: str, result: LifecycleResult) -> None:
        try:
            last_processed = await get_text(self.store, self.keys.last_processed)
            if last_processed == today:
                logger.debug("Business date %s already processed", today)
                return

            logger.info(f"New business day {today} (last processed: {last_processed or 'never'})")
            if last_processed is not None:
                pipeline = self._generate(last_processed)
                if pipeline.report.has_activity:
                    await self._save_snapshot(pipeline)
                    result.snapshot_date = last_processed
                else:
                    logger.info(f"No sales for {last_processed}, skipping report save")

            await set_text(self.store, self.keys.last_processed, today)
            result.processed = True
        except Exception as e:
            await self._fail(result, "snapshot", today, e)

    def _generate(self, business_date: str) -> NightlyReportResult:
        return generate_nightly_report(
            self.orders.orders,
            business_date,
            settings=self.settings,
            is_ticket_category=self._is_ticket_category,
            tz=self._tz,
        )

    async def _save_snapshot(self, pipeline: NightlyReportResult) -> None:
        report = pipeline.report
        envelope = {
            "report": report.to_dict(),
            "verification": pipeline.verification.to_dict(),
            "saved_at": self._clock().isoformat(),
        }
        await set_json(self.store, self.keys.report_key(report.date), envelope)

        saved = await self.saved_report_dates()
        if report.date not in saved:
            await set_json(self.store, self.keys.saved_reports, sorted([*saved, report.date]))
            logger.info(f"Added {report.date} to saved reports list")

        logger.info(
            f"Saved nightly report for {report.date}: sales {report.total_sales:.2f}, "
            f"{report.total_orders} orders, {len(report.user_breakdown)} users"
        )

    # ------------------------------------------------------------------ #
    # Retention cleanup
    # ------------------------------------------------------------------ #

    async def _clean_old_data(self, today: str, result: LifecycleResult) -> None:
        try:
            last_clean = await get_text(self.store, self.keys.last_clean)
            if last_clean == today:
                logger.debug("Cleanup already ran for %s", today)
                return

            cutoff = retention_cutoff(today, self.settings.retention_days)
            logger.info(f"Clearing orders and reports older than {cutoff}")

            cleared, kept = await self.orders.prune_before(
                cutoff, self.settings.cutoff_hour, self._tz
            )
            result.cleared_orders = cleared

            saved = await self.saved_report_dates()
            removed: list[str] = []
            failed: list[str] = []
            for report_date in (d for d in saved if d < cutoff):
                try:
                    await self.store.delete(self.keys.report_key(report_date))
                    removed.append(report_date)
                except Exception as e:
                    logger.error("Error removing old report %s: %s", report_date, e)
                    failed.append(report_date)

            if removed:
                remaining = [d for d in saved if d not in removed]
                await set_json(self.store, self.keys.saved_reports, remaining)
                result.removed_reports = removed
            if failed:
                raise PersistenceError(f"Could not delete saved reports: {failed}")

            record = RunRecord(
                stage="clean",
                business_date=today,
                status="ok",
                last_run=self._clock().isoformat(),
                detail={
                    "cutoff_date": cutoff,
                    "cleared_count": cleared,
                    "kept_count": kept,
                    "removed_reports": removed,
                },
            )
            await write_record(self.store, self.keys.clean_log, record)
            await set_text(self.store, self.keys.last_clean, today)
            result.cleaned = True
            logger.info(
                f"Cleanup done: cleared {cleared} orders, kept {kept}, "
                f"removed {len(removed)} saved report(s)"
            )
        except Exception as e:
            await self._fail(result, "clean", today, e)

    async def _fail(
        self, result: LifecycleResult, stage: str, business_date: str, error: Exception
    ) -> None:
        logger.exception("Lifecycle stage %r failed for %s: %s", stage, business_date, error)
        result.errors.append(f"{stage}: {error}")
        record = RunRecord(
            stage=stage,
            business_date=business_date,
            status="failed",
            last_run=self._clock().isoformat(),
            detail={"error": str(error), "error_type": type(error).__name__},
        )
        try:
            await write_record(self.store, self.keys.last_error, record)
        except Exception as e:
            logger.error("Could not record lifecycle error: %s", e)

    # ------------------------------------------------------------------ #
    # Saved reports
    # ------------------------------------------------------------------ #

    async def saved_report_dates(self) -> list[str]:
        """Business dates with a retained snapshot, ascending.

        Raises:
            PersistenceError: If the index cannot be read.
        """
        data = await get_json(self.store, self.keys.saved_reports)
        if data is None:
            return []
        if not isinstance(data, list):
            raise PersistenceError(f"Saved reports index {self.keys.saved_reports!r} is not a list")
        return sorted(str(d) for d in data)

    async def load_snapshot(self, business_date: str) -> NightlyReport | None:
        """Load the saved report for a business date, None if there is none.

        Raises:
            PersistenceError: If the snapshot cannot be read or decoded.
        """
        data = await get_json(self.store, self.keys.report_key(business_date))
        if data is None:
            return None
        try:
            return NightlyReport.from_dict(data["report"])
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(f"Saved report for {business_date} is malformed: {e}") from e

    async def weekly_totals(self, business_date: str | None = None) -> WeeklyTotals:
        """Friday-Thursday totals for the week containing ``business_date``.

        Uses saved snapshots, plus a live report for the current business
        date when it falls inside the week.
        """
        business_date = business_date or self.today()
        week_start, week_end = week_bounds(business_date)

        reports = []
        for saved_date in await self.saved_report_dates():
            if week_start <= saved_date <= week_end:
                report = await self.load_snapshot(saved_date)
                if report is not None:
                    reports.append(report)

        today = self.today()
        if week_start <= today <= week_end and all(r.date != today for r in reports):
            await self.orders.load()
            live = aggregate(
                self.orders.orders,
                today,
                settings=self.settings,
                is_ticket_category=self._is_ticket_category,
                tz=self._tz,
            )
            if live.has_activity:
                reports.append(live)
        return weekly_totals(reports, business_date)
