"""Example: Daily Snapshots and Retention

This example runs the lifecycle manager over a directory of JSON files the
way a long-running terminal process would: once at start-up and then every
15 minutes. On each new business day the previous day's report is saved and
data older than the retention window is removed.

Press Ctrl+C to stop.
"""

import asyncio
import logging

from theatre_pos import ReportSettings
from theatre_pos.lifecycle import DailyReportTask, DirectoryStore, ReportLifecycleManager

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")


async def main() -> None:
    store = DirectoryStore("data/pos_state")
    manager = ReportLifecycleManager(store, settings=ReportSettings(retention_days=14))
    task = DailyReportTask(manager, interval_seconds=15 * 60)

    result = await task.run_once()
    if result is not None:
        print(f"Business date {result.business_date}: snapshot={result.snapshot_date}, "
              f"cleared {result.cleared_orders} orders")

    saved = await manager.saved_report_dates()
    print(f"Saved reports: {', '.join(saved) or 'none'}")

    week = await manager.weekly_totals()
    print(f"Week {week.week_start} to {week.week_end}: ${week.total_sales:.2f} "
          f"over {week.total_orders} orders")

    handle = task.start()
    try:
        await handle
    finally:
        await task.stop()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nStopped")
