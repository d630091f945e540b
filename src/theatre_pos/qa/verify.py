"""Reconciliation verifier for nightly reports.

Cross-checks the independently derived views of a NightlyReport against each
other. This is a diagnostic, not a gate: the report is never altered, and
every mismatch comes back as a :class:`Discrepancy` the caller can log,
alert on or reject.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from theatre_pos.config import ReportSettings
from theatre_pos.reports.classify import ReportDepartment
from theatre_pos.reports.models import NightlyReport
from theatre_pos.utils import round_money

logger = logging.getLogger(__name__)

ERROR = "error"
WARNING = "warning"

# Absorbs float representation error on top of the currency tolerance.
_EPSILON = 1e-9


@dataclass(frozen=True)
class Discrepancy:
    """A single failed reconciliation check.

    Attributes:
        kind: Check identifier, e.g. "cash_card_total".
        expected: Reference value.
        actual: Value derived from the breakdown being checked.
        delta: ``actual - expected`` rounded to cents.
        severity: "error" or "warning".
        message: Human-readable description.
    """

    kind: str
    expected: float
    actual: float
    delta: float
    severity: str = ERROR
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "expected": self.expected,
            "actual": self.actual,
            "delta": self.delta,
            "severity": self.severity,
            "message": self.message,
        }


@dataclass
class VerificationResult:
    """Result of :func:`verify`.

    Attributes:
        passed: False if any error-severity discrepancy was found.
        discrepancies: Every failed check, errors and warnings.
        checks_run: Number of checks evaluated.
        summary: Counts for logging and display.
    """

    passed: bool
    discrepancies: list[Discrepancy] = field(default_factory=list)
    checks_run: int = 0
    summary: dict = field(default_factory=dict)

    @property
    def errors(self) -> list[Discrepancy]:
        return [d for d in self.discrepancies if d.severity == ERROR]

    @property
    def warnings(self) -> list[Discrepancy]:
        return [d for d in self.discrepancies if d.severity == WARNING]

    def to_dict(self) -> dict:
        return {
            "passed": self.passed,
            "discrepancies": [d.to_dict() for d in self.discrepancies],
            "checks_run": self.checks_run,
            "summary": dict(self.summary),
        }


class _Checker:
    def __init__(self, tolerance: float) -> None:
        self.tolerance = tolerance
        self.checks_run = 0
        self.discrepancies: list[Discrepancy] = []

    def check(
        self,
        kind: str,
        expected: float,
        actual: float,
        message: str,
        severity: str = ERROR,
        tolerance: float | None = None,
    ) -> None:
        self.checks_run += 1
        atol = (self.tolerance if tolerance is None else tolerance) + _EPSILON
        if np.isclose(actual, expected, rtol=0.0, atol=atol):
            return
        discrepancy = Discrepancy(
            kind=kind,
            expected=float(expected),
            actual=float(actual),
            delta=round_money(actual - expected),
            severity=severity,
            message=message,
        )
        self.discrepancies.append(discrepancy)


def _sum(values) -> float:
    return round_money(float(np.sum(np.fromiter(values, dtype=float))))


def verify(report: NightlyReport, settings: ReportSettings | None = None) -> VerificationResult:
    """Run every reconciliation check on a report.

    Checks (tolerance ``settings.tolerance``):
    - cash + card sales equal total sales
    - department sales add up to total sales
    - department fees add up to total card fees
    - cash across departments equals cash sales, same for card
    - each department's cash + card equals its sales
    - show sales add up to box-office sales (only with box-office orders)
    - implied card fee rate matches ``credit_card_fee_percent`` (warning,
      only when configured)

    Args:
        report: Report to check.
        settings: Report settings. Defaults to ``ReportSettings()``.

    Returns:
        VerificationResult with every discrepancy found.

    """
    settings = settings or ReportSettings()
    checker = _Checker(settings.tolerance)
    departments = report.department_breakdown
    payments = report.payment_breakdown

    checker.check(
        "cash_card_total",
        expected=report.total_sales,
        actual=round_money(report.cash_sales + report.card_sales),
        message="cash sales + card sales does not match total sales",
    )
    checker.check(
        "department_total",
        expected=report.total_sales,
        actual=_sum(d.sales for d in departments.values()),
        message="department sales do not add up to total sales",
    )
    checker.check(
        "department_fees",
        expected=report.credit_card_fees,
        actual=_sum(d.credit_card_fees for d in departments.values()),
        message="department card fees do not add up to total card fees",
    )
    checker.check(
        "payment_cash",
        expected=report.cash_sales,
        actual=_sum(p.cash for p in payments.values()),
        message="cash across departments does not match cash sales",
    )
    checker.check(
        "payment_card",
        expected=report.card_sales,
        actual=_sum(p.card for p in payments.values()),
        message="card across departments does not match card sales",
    )

    for name, split in payments.items():
        dept_sales = departments[name].sales if name in departments else 0.0
        checker.check(
            f"department_payment_split:{name}",
            expected=dept_sales,
            actual=split.total,
            message=f"{name} cash + card does not match its sales",
        )

    box_office = departments.get(ReportDepartment.BOX_OFFICE.value)
    if box_office is not None and box_office.orders > 0:
        checker.check(
            "show_box_office",
            expected=box_office.sales,
            actual=_sum(s.sales for s in report.show_breakdown.values()),
            message="show sales do not add up to box-office sales",
        )

    card_subtotal = round_money(report.card_sales - report.credit_card_fees)
    if settings.credit_card_fee_percent is not None and card_subtotal > 0:
        expected_fees = round_money(card_subtotal * settings.credit_card_fee_percent / 100)
        # Per-order fee rounding can drift by up to half a cent per card order.
        checker.check(
            "card_fee_rate",
            expected=expected_fees,
            actual=report.credit_card_fees,
            message=(
                f"card fees imply {report.credit_card_fees / card_subtotal * 100:.4f}% "
                f"instead of {settings.credit_card_fee_percent}%"
            ),
            severity=WARNING,
            tolerance=max(settings.tolerance, 0.005 * report.total_orders),
        )

    for d in checker.discrepancies:
        logger.warning(
            f"Reconciliation {d.severity} on {report.date} [{d.kind}]: {d.message} "
            f"(expected {d.expected:.2f}, actual {d.actual:.2f}, delta {d.delta:+.2f})"
        )

    errors = [d for d in checker.discrepancies if d.severity == ERROR]
    summary = {
        "date": report.date,
        "checks_run": checker.checks_run,
        "error_count": len(errors),
        "warning_count": len(checker.discrepancies) - len(errors),
        "skipped_orders": report.skipped_orders,
    }

    logger.info(
        f"Reconciliation for {report.date}: {checker.checks_run} checks, "
        f"{summary['error_count']} errors, {summary['warning_count']} warnings"
    )

    return VerificationResult(
        passed=not errors,
        discrepancies=checker.discrepancies,
        checks_run=checker.checks_run,
        summary=summary,
    )
