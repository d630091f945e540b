"""Order builders shared by the tests."""

from __future__ import annotations

from datetime import datetime

from theatre_pos.orders.models import Department, LineItem, Order, PaymentMethod, ShowType


def ticket(price: float = 10.0, quantity: int = 1, product_id: str = "ticket-adult") -> LineItem:
    return LineItem(
        product_id=product_id,
        name="Adult Ticket",
        quantity=quantity,
        unit_price=price,
        category="tickets",
    )


def popcorn(price: float = 8.0, quantity: int = 1) -> LineItem:
    return LineItem(
        product_id="popcorn-large",
        name="Large Popcorn",
        quantity=quantity,
        unit_price=price,
        category="concessions",
    )


def make_order(
    order_id: str,
    items: list[LineItem],
    *,
    timestamp: datetime = datetime(2025, 1, 15, 19, 30),
    department: Department = Department.CANDY_COUNTER,
    payment_method: PaymentMethod = PaymentMethod.CASH,
    fee: float = 0.0,
    total: float | None = None,
    user_id: str | None = "u1",
    user_name: str | None = "Alice Smith",
    user_role: str | None = "staff",
    show_type: ShowType | None = None,
) -> Order:
    subtotal = round(sum(i.unit_price * i.quantity for i in items), 2)
    return Order(
        id=order_id,
        items=tuple(items),
        subtotal=subtotal,
        credit_card_fee=fee,
        total=round(subtotal + fee, 2) if total is None else total,
        timestamp=timestamp,
        payment_method=payment_method,
        department=department,
        user_id=user_id,
        user_name=user_name,
        user_role=user_role,
        show_type=show_type,
    )


