"""Tests for report reconciliation."""

import pytest
from builders import make_order, popcorn, ticket

from theatre_pos import generate_nightly_report
from theatre_pos.config import ReportSettings
from theatre_pos.orders.models import Department, PaymentMethod, ShowType
from theatre_pos.qa import VerificationResult, verify
from theatre_pos.qa.verify import ERROR, WARNING
from theatre_pos.reports import aggregate
from theatre_pos.reports.models import DepartmentSales, NightlyReport, PaymentSplit, ShowSales

BUSINESS_DATE = "2025-01-15"


def _box_office_report(**overrides) -> NightlyReport:
    values = dict(
        date=BUSINESS_DATE,
        total_sales=25.0,
        total_orders=1,
        cash_sales=25.0,
        card_sales=0.0,
        credit_card_fees=0.0,
        department_breakdown={"box-office": DepartmentSales(sales=25.0, orders=1)},
        show_breakdown={"matinee": ShowSales(sales=25.0, orders=1, cash_sales=25.0)},
        payment_breakdown={"box-office": PaymentSplit(cash=25.0)},
    )
    values.update(overrides)
    return NightlyReport(**values)


def test_aggregated_report_passes(mixed_order, matinee_order) -> None:
    """Test that a report built by the aggregator reconciles."""
    orders = [
        mixed_order,
        matinee_order,
        make_order("3", [popcorn(3.99, 3)], payment_method=PaymentMethod.CARD, fee=0.36),
        make_order("4", [ticket(7.25, 3), popcorn(2.5)], payment_method=PaymentMethod.CARD,
                   fee=0.97),
        make_order("5", [ticket(11.0)], department=Department.BOX_OFFICE,
                   show_type=ShowType.NIGHTLY_SHOW, payment_method=PaymentMethod.CARD,
                   fee=0.55),
    ]
    result = verify(aggregate(orders, BUSINESS_DATE))

    assert isinstance(result, VerificationResult)
    assert result.passed is True
    assert result.discrepancies == []
    assert result.checks_run >= 9
    assert result.summary["error_count"] == 0


def test_empty_report_passes() -> None:
    result = verify(aggregate([], BUSINESS_DATE))

    assert result.passed is True


def test_cash_card_mismatch() -> None:
    report = _box_office_report(cash_sales=24.0)
    result = verify(report)

    assert result.passed is False
    kinds = {d.kind for d in result.errors}
    assert "cash_card_total" in kinds
    mismatch = next(d for d in result.errors if d.kind == "cash_card_total")
    assert mismatch.expected == 25.0
    assert mismatch.actual == 24.0
    assert mismatch.delta == -1.0
    assert mismatch.severity == ERROR


def test_difference_within_tolerance_passes() -> None:
    report = _box_office_report(cash_sales=24.99)

    assert verify(report).passed is True
    assert verify(_box_office_report(cash_sales=24.98)).passed is False


def test_department_payment_split_mismatch() -> None:
    report = _box_office_report(payment_breakdown={"box-office": PaymentSplit(cash=20.0)})
    result = verify(report)

    assert result.passed is False
    assert {d.kind for d in result.errors} == {
        "payment_cash",
        "department_payment_split:box-office",
    }


def test_show_sales_mismatch() -> None:
    report = _box_office_report(show_breakdown={"matinee": ShowSales(sales=20.0, orders=1)})
    result = verify(report)

    assert [d.kind for d in result.errors] == ["show_box_office"]


def test_show_check_skipped_without_box_office_orders() -> None:
    report = NightlyReport(
        date=BUSINESS_DATE,
        total_sales=8.0,
        total_orders=1,
        cash_sales=8.0,
        department_breakdown={
            "box-office": DepartmentSales(),
            "candy-counter-concessions": DepartmentSales(sales=8.0, orders=1),
        },
        payment_breakdown={"candy-counter-concessions": PaymentSplit(cash=8.0)},
    )
    result = verify(report)

    assert result.passed is True
    assert "show_box_office" not in {d.kind for d in result.discrepancies}


def test_department_fees_mismatch() -> None:
    report = _box_office_report(credit_card_fees=1.25)
    result = verify(report)

    assert "department_fees" in {d.kind for d in result.errors}


def test_card_fee_rate_warning(mixed_order) -> None:
    """Test that an unexpected fee rate only warns."""
    report = aggregate([mixed_order], BUSINESS_DATE)

    assert verify(report, ReportSettings(credit_card_fee_percent=5.0)).discrepancies == []

    result = verify(report, ReportSettings(credit_card_fee_percent=3.0))
    assert result.passed is True
    assert [d.kind for d in result.warnings] == ["card_fee_rate"]
    assert result.warnings[0].severity == WARNING
    assert result.warnings[0].expected == pytest.approx(0.54)
    assert result.summary["warning_count"] == 1


def test_verify_does_not_modify_report() -> None:
    report = _box_office_report(cash_sales=24.0)
    before = report.to_dict()
    verify(report)

    assert report.to_dict() == before


def test_result_to_dict() -> None:
    result = verify(_box_office_report(cash_sales=24.0))
    data = result.to_dict()

    assert data["passed"] is False
    assert data["discrepancies"][0]["kind"] == "cash_card_total"
    assert data["summary"]["date"] == BUSINESS_DATE


def test_generate_nightly_report(mixed_order, matinee_order) -> None:
    result = generate_nightly_report([mixed_order, matinee_order], BUSINESS_DATE)

    assert result.passed is True
    assert result.report.total_sales == 43.90
    assert result.verification.checks_run > 0
