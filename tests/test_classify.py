"""Tests for the order classifier."""

from datetime import datetime

import pytest
from builders import make_order, popcorn, ticket

from theatre_pos.orders.categories import TicketCategoryRegistry
from theatre_pos.orders.models import Department, LineItem, PaymentMethod, ShowType
from theatre_pos.reports.classify import ReportDepartment, classify


def test_mixed_order_split(mixed_order) -> None:
    """Test the $10 ticket + $8 popcorn card order split."""
    allocations = classify(mixed_order)

    assert [a.department for a in allocations] == [
        ReportDepartment.AFTER_CLOSING_TICKETS,
        ReportDepartment.CANDY_COUNTER_CONCESSIONS,
    ]
    tickets, concessions = allocations
    assert tickets.amount == pytest.approx(10.50)
    assert concessions.amount == pytest.approx(8.40)
    assert tickets.fee == pytest.approx(0.50)
    assert concessions.fee == pytest.approx(0.40)
    assert tickets.subtotal == pytest.approx(10.0)
    assert concessions.subtotal == pytest.approx(8.0)
    assert tickets.payment_method is PaymentMethod.CARD
    assert concessions.payment_method is PaymentMethod.CARD


def test_mixed_order_allocations_sum_to_total() -> None:
    """Test that split amounts always add back up to the order total."""
    orders = [
        make_order("a", [ticket(7.25, 3), popcorn(3.99, 2)], fee=0.89,
                   payment_method=PaymentMethod.CARD),
        make_order("b", [ticket(9.99), popcorn(0.01)], fee=0.30,
                   payment_method=PaymentMethod.CARD),
        make_order("c", [ticket(12.0, 4), popcorn(5.5, 3)]),
        make_order("d", [ticket(1.0), popcorn(2.0)], fee=0.1,
                   payment_method=PaymentMethod.CARD),
    ]
    for order in orders:
        allocations = classify(order)
        assert len(allocations) == 2
        assert sum(a.amount for a in allocations) == pytest.approx(order.total, abs=1e-9)
        assert sum(a.fee for a in allocations) == pytest.approx(order.credit_card_fee, abs=1e-9)
        # Ticket portion is whole cents
        assert allocations[0].amount == round(allocations[0].amount, 2)


def test_box_office_order_is_whole(matinee_order) -> None:
    allocations = classify(matinee_order)

    assert len(allocations) == 1
    allocation = allocations[0]
    assert allocation.department is ReportDepartment.BOX_OFFICE
    assert allocation.amount == 25.0
    assert allocation.show_type is ShowType.MATINEE


def test_box_office_order_with_concessions_is_not_split() -> None:
    order = make_order(
        "bo-2",
        [ticket(10.0), popcorn(8.0)],
        department=Department.BOX_OFFICE,
        show_type=ShowType.NIGHTLY_SHOW,
    )
    allocations = classify(order)

    assert len(allocations) == 1
    assert allocations[0].department is ReportDepartment.BOX_OFFICE
    assert allocations[0].amount == 18.0


def test_candy_counter_without_tickets() -> None:
    order = make_order("cc-1", [popcorn(8.0, 2)], fee=0.8, payment_method=PaymentMethod.CARD)
    allocations = classify(order)

    assert len(allocations) == 1
    assert allocations[0].department is ReportDepartment.CANDY_COUNTER_CONCESSIONS
    assert allocations[0].amount == order.total
    assert allocations[0].fee == 0.8
    assert allocations[0].show_type is None


def test_candy_counter_tickets_only() -> None:
    order = make_order("cc-2", [ticket(10.0, 2)])
    allocations = classify(order)

    assert len(allocations) == 1
    assert allocations[0].department is ReportDepartment.AFTER_CLOSING_TICKETS
    assert allocations[0].amount == 20.0


def test_order_without_items_has_no_allocations() -> None:
    order = make_order("empty", [], total=0.0)
    assert classify(order) == []


def test_zero_subtotal_mixed_order_goes_to_concessions() -> None:
    order = make_order("free", [ticket(0.0), popcorn(0.0)])
    allocations = classify(order)

    assert len(allocations) == 1
    assert allocations[0].department is ReportDepartment.CANDY_COUNTER_CONCESSIONS
    assert allocations[0].amount == 0.0


def test_custom_ticket_category() -> None:
    """Test that a registered custom category is treated as a ticket."""
    season_pass = LineItem(
        product_id="season-pass",
        name="Season Pass",
        quantity=1,
        unit_price=40.0,
        category="season-passes",
    )
    order = make_order("sp-1", [season_pass, popcorn(8.0)])

    assert [a.department for a in classify(order)] == [
        ReportDepartment.CANDY_COUNTER_CONCESSIONS
    ]

    registry = TicketCategoryRegistry.with_custom(["season-passes"])
    allocations = classify(order, registry)
    assert [a.department for a in allocations] == [
        ReportDepartment.AFTER_CLOSING_TICKETS,
        ReportDepartment.CANDY_COUNTER_CONCESSIONS,
    ]
    assert allocations[0].amount == 40.0
    assert allocations[1].amount == pytest.approx(8.0)


def test_allocations_carry_cashier() -> None:
    order = make_order(
        "cc-3",
        [ticket(10.0), popcorn(8.0)],
        user_id="u9",
        user_name="Bob Jones",
        user_role="manager",
        timestamp=datetime(2025, 1, 15, 23, 0),
    )
    for allocation in classify(order):
        assert allocation.order_id == "cc-3"
        assert allocation.user_id == "u9"
        assert allocation.user_name == "Bob Jones"
        assert allocation.user_role == "manager"
