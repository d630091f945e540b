"""Public API for the nightly report pipeline.

Runs aggregation and reconciliation in memory over an order collection
handed in by the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import tzinfo

from theatre_pos.config import ReportSettings
from theatre_pos.orders.categories import DEFAULT_TICKET_CATEGORIES
from theatre_pos.orders.models import Order
from theatre_pos.qa.verify import VerificationResult, verify
from theatre_pos.reports.aggregate import aggregate
from theatre_pos.reports.models import NightlyReport

logger = logging.getLogger(__name__)


@dataclass
class NightlyReportResult:
    """Result of the nightly report pipeline.

    Attributes:
        report: The aggregated report.
        verification: Reconciliation checks run on the report.
    """

    report: NightlyReport
    verification: VerificationResult

    @property
    def passed(self) -> bool:
        return self.verification.passed


def generate_nightly_report(
    orders: Iterable[Order],
    business_date: str,
    *,
    settings: ReportSettings | None = None,
    is_ticket_category: Callable[[str], bool] = DEFAULT_TICKET_CATEGORIES,
    tz: tzinfo | None = None,
) -> NightlyReportResult:
    """Aggregate a business date's orders and reconcile the result.

    This function:
    - does NOT read or write any storage,
    - does NOT raise on malformed orders or reconciliation failures,
    - MAY log progress via the logging module.

    Args:
        orders: Order log (or a slice of it) to report on.
        business_date: Business date in YYYY-MM-DD format.
        settings: Report settings. Defaults to ``ReportSettings()``.
        is_ticket_category: Predicate deciding whether a category is a ticket.
        tz: Optional venue timezone for aware timestamps.

    Returns:
        NightlyReportResult with the report and its verification.

    """
    settings = settings or ReportSettings()
    report = aggregate(
        orders,
        business_date,
        settings=settings,
        is_ticket_category=is_ticket_category,
        tz=tz,
    )
    verification = verify(report, settings)
    if not verification.passed:
        logger.error(
            f"Nightly report {business_date} failed reconciliation with "
            f"{len(verification.errors)} discrepancy(ies)"
        )
    return NightlyReportResult(report=report, verification=verification)
