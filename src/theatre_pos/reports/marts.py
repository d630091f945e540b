"""Tabular views of nightly reports.

Turns a NightlyReport into one DataFrame per breakdown, and a set of reports
into a one-row-per-date summary table. Formatting those tables as text or CSV
is left to the caller.
"""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd

from theatre_pos.reports.classify import ReportDepartment
from theatre_pos.reports.models import NightlyReport

SUMMARY_COLUMNS = [
    "date",
    "total_sales",
    "net_sales",
    "total_orders",
    "average_order_value",
    "cash_sales",
    "card_sales",
    "credit_card_fees",
    "box_office_sales",
    "candy_counter_sales",
    "after_closing_sales",
    "skipped_orders",
]


def summary_row(report: NightlyReport) -> dict:
    """Flatten a report's headline figures into a single row."""
    departments = report.department_breakdown

    def dept_sales(dept: ReportDepartment) -> float:
        d = departments.get(dept.value)
        return d.sales if d is not None else 0.0

    return {
        "date": report.date,
        "total_sales": report.total_sales,
        "net_sales": report.net_sales,
        "total_orders": report.total_orders,
        "average_order_value": report.average_order_value,
        "cash_sales": report.cash_sales,
        "card_sales": report.card_sales,
        "credit_card_fees": report.credit_card_fees,
        "box_office_sales": dept_sales(ReportDepartment.BOX_OFFICE),
        "candy_counter_sales": dept_sales(ReportDepartment.CANDY_COUNTER_CONCESSIONS),
        "after_closing_sales": dept_sales(ReportDepartment.AFTER_CLOSING_TICKETS),
        "skipped_orders": report.skipped_orders,
    }


def reports_summary_frame(reports: Iterable[NightlyReport]) -> pd.DataFrame:
    """One row per report, sorted by date."""
    rows = [summary_row(r) for r in reports]
    if not rows:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)
    df = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
    return df.sort_values("date", kind="mergesort").reset_index(drop=True)


def report_to_frames(report: NightlyReport) -> dict[str, pd.DataFrame]:
    """Split a report into DataFrames.

    Returns:
        Dictionary with keys:
        - "summary": one row of headline figures
        - "departments": department, sales, orders, credit_card_fees, net_sales
        - "payments": department, cash, card, total
        - "shows": show_type, sales, orders, cash_sales, card_sales, credit_card_fees
        - "users": user_id, user_name, user_role, sales, orders
        - "top_products": product_id, name, quantity_sold, revenue

    """
    departments = pd.DataFrame(
        [
            {
                "department": name,
                "sales": d.sales,
                "orders": d.orders,
                "credit_card_fees": d.credit_card_fees,
                "net_sales": d.net_sales,
            }
            for name, d in report.department_breakdown.items()
        ],
        columns=["department", "sales", "orders", "credit_card_fees", "net_sales"],
    )
    payments = pd.DataFrame(
        [
            {"department": name, "cash": p.cash, "card": p.card, "total": p.total}
            for name, p in report.payment_breakdown.items()
        ],
        columns=["department", "cash", "card", "total"],
    )
    shows = pd.DataFrame(
        [{"show_type": name, **s.to_dict()} for name, s in report.show_breakdown.items()],
        columns=["show_type", "sales", "orders", "cash_sales", "card_sales", "credit_card_fees"],
    )
    users = pd.DataFrame(
        [u.to_dict() for u in report.user_breakdown],
        columns=["user_id", "user_name", "user_role", "sales", "orders"],
    )
    products = pd.DataFrame(
        [p.to_dict() for p in report.top_products],
        columns=["product_id", "name", "quantity_sold", "revenue"],
    )

    return {
        "summary": pd.DataFrame([summary_row(report)], columns=SUMMARY_COLUMNS),
        "departments": departments,
        "payments": payments,
        "shows": shows,
        "users": users,
        "top_products": products,
    }
