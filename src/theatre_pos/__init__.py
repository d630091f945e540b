"""Theatre POS Core - nightly sales reports for a single-venue theatre.

This package turns the day's order log into a reconciled nightly report:

- **Calendar**: business dates with a 02:00 cutoff
- **Orders**: order records, ticket categories, pandas item frames
- **Reports**: per-order classification and nightly aggregation
- **QA**: reconciliation of a report against itself
- **Lifecycle**: daily snapshots and retention cleanup over a key-value store

Module Structure:
    theatre_pos.calendar: Business-date assignment
    theatre_pos.orders: Orders, line items, ticket category registry
    theatre_pos.reports: Classifier, aggregator, report models, weekly totals
    theatre_pos.qa: Reconciliation checks
    theatre_pos.lifecycle: Stores, lifecycle manager, scheduled task
    theatre_pos.config: ReportSettings and StorageKeys

Quick Start:
    >>> from theatre_pos import ReportSettings, generate_nightly_report
    >>> from theatre_pos.orders import load_orders
    >>>
    >>> loaded = load_orders(records)
    >>> result = generate_nightly_report(loaded.orders, "2025-01-15")
    >>> result.report.total_sales
    1234.5
    >>> result.passed
    True

Business dates:
    An order placed at 01:59 on the 16th belongs to business date the 15th;
    one placed at 02:00 belongs to the 16th.
"""

__version__ = "0.1.0"

from theatre_pos.api import NightlyReportResult, generate_nightly_report
from theatre_pos.calendar import business_date_of
from theatre_pos.config import ReportSettings, StorageKeys
from theatre_pos.exceptions import (
    ConfigError,
    DataQualityError,
    PersistenceError,
    TheatrePosError,
)

__all__ = [
    "ConfigError",
    "DataQualityError",
    "NightlyReportResult",
    "PersistenceError",
    "ReportSettings",
    "StorageKeys",
    "TheatrePosError",
    "__version__",
    "business_date_of",
    "generate_nightly_report",
]
