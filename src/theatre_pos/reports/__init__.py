"""Nightly sales report: classification and aggregation.

- **classify**: splits one order into report-department allocations.
- **aggregate**: folds a business date's orders into a ``NightlyReport``.
- **marts**: DataFrame views of reports.
- **weekly**: Friday-Thursday roll-up over saved reports.

Example:
    >>> from theatre_pos.reports import aggregate, report_to_frames
    >>>
    >>> report = aggregate(orders, "2025-01-15")
    >>> report.department_breakdown["after-closing-tickets"].sales
    10.5
    >>> report_to_frames(report)["departments"]
"""

from theatre_pos.reports.aggregate import aggregate, select_business_day
from theatre_pos.reports.classify import OrderAllocation, ReportDepartment, classify
from theatre_pos.reports.marts import report_to_frames, reports_summary_frame
from theatre_pos.reports.models import (
    DepartmentSales,
    NightlyReport,
    PaymentSplit,
    ShowSales,
    TopProduct,
    UserSales,
)
from theatre_pos.reports.users import is_valid_real_user, resolve_role
from theatre_pos.reports.weekly import WeeklyTotals, week_bounds, weekly_totals

__all__ = [
    "DepartmentSales",
    "NightlyReport",
    "OrderAllocation",
    "PaymentSplit",
    "ReportDepartment",
    "ShowSales",
    "TopProduct",
    "UserSales",
    "WeeklyTotals",
    "aggregate",
    "classify",
    "is_valid_real_user",
    "report_to_frames",
    "reports_summary_frame",
    "resolve_role",
    "select_business_day",
    "week_bounds",
    "weekly_totals",
]
