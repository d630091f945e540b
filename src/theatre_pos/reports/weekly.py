"""Weekly roll-up of retained nightly reports.

The theatre's week runs Friday through Thursday; the roll-up sums the saved
snapshots that fall inside the week containing a given business date.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import timedelta

from theatre_pos.calendar import format_date, parse_date
from theatre_pos.reports.marts import reports_summary_frame
from theatre_pos.reports.models import NightlyReport
from theatre_pos.utils import round_money

logger = logging.getLogger(__name__)

WEEK_START_WEEKDAY = 4  # Friday


@dataclass(frozen=True)
class WeeklyTotals:
    """Sums over the reports of one Friday-Thursday week.

    Attributes:
        week_start: Friday of the week (YYYY-MM-DD).
        week_end: Thursday of the week (YYYY-MM-DD).
        dates: Business dates that had a report, ascending.
    """

    week_start: str
    week_end: str
    dates: tuple[str, ...] = ()
    total_sales: float = 0.0
    total_orders: int = 0
    credit_card_fees: float = 0.0
    box_office_sales: float = 0.0
    candy_counter_sales: float = 0.0
    after_closing_sales: float = 0.0


def week_bounds(business_date: str) -> tuple[str, str]:
    """Friday and Thursday of the week containing a business date.

    Examples:
        >>> week_bounds("2025-01-16")  # a Thursday
        ('2025-01-10', '2025-01-16')
        >>> week_bounds("2025-01-17")  # a Friday
        ('2025-01-17', '2025-01-23')

    """
    day = parse_date(business_date)
    start = day - timedelta(days=(day.weekday() - WEEK_START_WEEKDAY) % 7)
    return format_date(start), format_date(start + timedelta(days=6))


def weekly_totals(reports: Iterable[NightlyReport], business_date: str) -> WeeklyTotals:
    """Sum the reports that fall in the week containing ``business_date``.

    Reports outside the week are ignored. If several reports share a date
    only the last one given is used.
    """
    week_start, week_end = week_bounds(business_date)

    df = reports_summary_frame(reports)
    if not df.empty:
        df = df.drop_duplicates(subset="date", keep="last")
        df = df[(df["date"] >= week_start) & (df["date"] <= week_end)]

    if df.empty:
        logger.info(f"No reports for week {week_start} to {week_end}")
        return WeeklyTotals(week_start=week_start, week_end=week_end)

    def money(column: str) -> float:
        return round_money(float(df[column].sum()))

    totals = WeeklyTotals(
        week_start=week_start,
        week_end=week_end,
        dates=tuple(sorted(df["date"].tolist())),
        total_sales=money("total_sales"),
        total_orders=int(df["total_orders"].sum()),
        credit_card_fees=money("credit_card_fees"),
        box_office_sales=money("box_office_sales"),
        candy_counter_sales=money("candy_counter_sales"),
        after_closing_sales=money("after_closing_sales"),
    )
    logger.info(
        f"Week {week_start} to {week_end}: {len(totals.dates)} report(s), "
        f"sales {totals.total_sales:.2f}"
    )
    return totals
