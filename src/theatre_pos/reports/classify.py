"""Order classifier: attribute each order to one or two lines of business.

The candy counter also sells tickets once the box office has closed, so a
single candy-counter order can carry both admissions and concessions. Such a
mixed order is split by item subtotal share into an after-closing ticket
portion and a concessions portion; the card fee is divided in the same
proportion. The split only divides attribution: both portions keep the
order's single payment method.

Examples:
    >>> [(a.department.value, round(a.amount, 2)) for a in classify(mixed_order)]
    [('after-closing-tickets', 10.5), ('candy-counter-concessions', 8.4)]

"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from theatre_pos.orders.categories import DEFAULT_TICKET_CATEGORIES
from theatre_pos.orders.models import Department, LineItem, Order, PaymentMethod, ShowType
from theatre_pos.utils import round_money

logger = logging.getLogger(__name__)


class ReportDepartment(str, Enum):
    """Line of business revenue is attributed to."""

    BOX_OFFICE = "box-office"
    CANDY_COUNTER_CONCESSIONS = "candy-counter-concessions"
    AFTER_CLOSING_TICKETS = "after-closing-tickets"


@dataclass(frozen=True)
class OrderAllocation:
    """The part of one order attributed to one report department.

    Attributes:
        order_id: Id of the source order.
        department: Report department the portion belongs to.
        subtotal: Item subtotal of the portion.
        fee: Card fee share of the portion.
        amount: ``subtotal + fee``; all allocations of an order sum to its total.
        payment_method: Payment method of the whole order.
        user_id: Cashier id of the order.
        user_name: Cashier name of the order.
        user_role: Cashier role of the order.
        show_type: Show of a box-office order, None otherwise.
    """

    order_id: str
    department: ReportDepartment
    subtotal: float
    fee: float
    amount: float
    payment_method: PaymentMethod
    user_id: str | None = None
    user_name: str | None = None
    user_role: str | None = None
    show_type: ShowType | None = None


def _allocation(
    order: Order,
    department: ReportDepartment,
    subtotal: float,
    fee: float,
    amount: float,
) -> OrderAllocation:
    return OrderAllocation(
        order_id=order.id,
        department=department,
        subtotal=subtotal,
        fee=fee,
        amount=amount,
        payment_method=order.payment_method,
        user_id=order.user_id,
        user_name=order.user_name,
        user_role=order.user_role,
        show_type=order.show_type if department is ReportDepartment.BOX_OFFICE else None,
    )


def _whole(order: Order, department: ReportDepartment) -> list[OrderAllocation]:
    return [
        _allocation(
            order,
            department,
            subtotal=order.subtotal,
            fee=order.credit_card_fee,
            amount=order.total,
        )
    ]


def _items_subtotal(items: list[LineItem]) -> float:
    return sum(item.unit_price * item.quantity for item in items)


def classify(
    order: Order,
    is_ticket_category: Callable[[str], bool] = DEFAULT_TICKET_CATEGORIES,
) -> list[OrderAllocation]:
    """Split an order into its report-department allocations.

    - Box-office orders are attributed whole to ``box-office``.
    - Candy-counter orders with no tickets go whole to
      ``candy-counter-concessions``; with only tickets, whole to
      ``after-closing-tickets``.
    - Mixed candy-counter orders are split by item subtotal share. The ticket
      portion is rounded to cents and the concessions portion is the exact
      complement, so the two always add up to ``order.total``.

    Args:
        order: Order to classify.
        is_ticket_category: Predicate deciding whether a category is a ticket.

    Returns:
        Zero allocations for an order without items, otherwise one or two.

    """
    if not order.items:
        logger.debug("Order %s has no items, no allocations", order.id)
        return []

    if order.department is Department.BOX_OFFICE:
        return _whole(order, ReportDepartment.BOX_OFFICE)

    ticket_items = [item for item in order.items if is_ticket_category(item.category)]
    other_items = [item for item in order.items if not is_ticket_category(item.category)]

    if not ticket_items:
        return _whole(order, ReportDepartment.CANDY_COUNTER_CONCESSIONS)
    if not other_items:
        return _whole(order, ReportDepartment.AFTER_CLOSING_TICKETS)

    ticket_subtotal = _items_subtotal(ticket_items)
    other_subtotal = _items_subtotal(other_items)
    items_subtotal = ticket_subtotal + other_subtotal
    if items_subtotal <= 0:
        logger.warning(
            "Mixed order %s has a zero item subtotal, attributing it whole to concessions",
            order.id,
        )
        return _whole(order, ReportDepartment.CANDY_COUNTER_CONCESSIONS)

    proportion = ticket_subtotal / items_subtotal
    ticket_fee = order.credit_card_fee * proportion
    ticket_amount = round_money(ticket_subtotal + ticket_fee)
    other_amount = order.total - ticket_amount
    ticket_fee = round_money(ticket_fee)
    other_fee = round_money(order.credit_card_fee - ticket_fee)

    logger.debug(
        f"Split mixed order {order.id}: tickets {ticket_amount:.2f}, "
        f"concessions {other_amount:.2f} (ticket share {proportion:.4f})"
    )

    return [
        _allocation(
            order,
            ReportDepartment.AFTER_CLOSING_TICKETS,
            subtotal=round_money(ticket_subtotal),
            fee=ticket_fee,
            amount=ticket_amount,
        ),
        _allocation(
            order,
            ReportDepartment.CANDY_COUNTER_CONCESSIONS,
            subtotal=round_money(other_amount - other_fee),
            fee=other_fee,
            amount=other_amount,
        ),
    ]
