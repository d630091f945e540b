"""Aggregator: fold one business date's orders into a NightlyReport.

The scalar totals (total, cash, card, fees) come straight from whole orders.
The department and payment breakdowns come from classifier allocations, the
show breakdown from whole box-office orders, and the user breakdown from
whole orders grouped by cashier. Keeping these derivations independent is
what lets the verifier cross-check them.

Every running sum is rounded to cents after each addition.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from theatre_pos.calendar import DEFAULT_CUTOFF_HOUR, business_date_of
from theatre_pos.config import ReportSettings
from theatre_pos.orders.categories import DEFAULT_TICKET_CATEGORIES
from theatre_pos.orders.frame import orders_to_item_frame, top_products
from theatre_pos.orders.models import Department, Order, PaymentMethod, ShowType, order_problem
from theatre_pos.reports.classify import ReportDepartment, classify
from theatre_pos.reports.models import (
    DepartmentSales,
    NightlyReport,
    PaymentSplit,
    ShowSales,
    TopProduct,
    UserSales,
)
from theatre_pos.reports.users import is_valid_real_user, resolve_role
from theatre_pos.utils import add_money

logger = logging.getLogger(__name__)


@dataclass
class _DepartmentAcc:
    sales: float = 0.0
    orders: int = 0
    fees: float = 0.0
    cash: float = 0.0
    card: float = 0.0


@dataclass
class _ShowAcc:
    sales: float = 0.0
    orders: int = 0
    cash: float = 0.0
    card: float = 0.0
    fees: float = 0.0


@dataclass
class _UserAcc:
    user_id: str
    user_name: str
    user_role: str | None = None
    sales: float = 0.0
    orders: int = 0


@dataclass
class _Totals:
    sales: float = 0.0
    orders: int = 0
    cash: float = 0.0
    card: float = 0.0
    fees: float = 0.0
    skipped: int = 0
    departments: dict[str, _DepartmentAcc] = field(
        default_factory=lambda: {d.value: _DepartmentAcc() for d in ReportDepartment}
    )
    shows: dict[str, _ShowAcc] = field(
        default_factory=lambda: {s.value: _ShowAcc() for s in ShowType}
    )
    users: dict[str, _UserAcc] = field(default_factory=dict)


def select_business_day(
    orders: Iterable[Order],
    business_date: str,
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
    tz: tzinfo | None = None,
) -> tuple[list[Order], int]:
    """Pick the usable orders of one business date.

    Returns:
        Tuple of (orders of the date that can be reconciled, number of
        malformed orders skipped). Orders whose timestamp cannot be read are
        counted as skipped for every date since they cannot be placed.

    """
    selected: list[Order] = []
    skipped = 0
    for order in orders:
        if not isinstance(order.timestamp, datetime):
            logger.warning("Skipping order %s: timestamp is not a datetime", order.id)
            skipped += 1
            continue
        if business_date_of(order.timestamp, cutoff_hour, tz) != business_date:
            continue
        problem = order_problem(order)
        if problem is not None:
            logger.warning("Skipping order %s: %s", order.id, problem)
            skipped += 1
            continue
        selected.append(order)
    return selected, skipped


def _add_order(
    acc: _Totals,
    order: Order,
    is_ticket_category: Callable[[str], bool],
) -> None:
    acc.sales = add_money(acc.sales, order.total)
    acc.orders += 1
    acc.fees = add_money(acc.fees, order.credit_card_fee)
    if order.payment_method is PaymentMethod.CASH:
        acc.cash = add_money(acc.cash, order.total)
    else:
        acc.card = add_money(acc.card, order.total)

    for allocation in classify(order, is_ticket_category):
        dept = acc.departments[allocation.department.value]
        dept.sales = add_money(dept.sales, allocation.amount)
        dept.orders += 1
        dept.fees = add_money(dept.fees, allocation.fee)
        if allocation.payment_method is PaymentMethod.CASH:
            dept.cash = add_money(dept.cash, allocation.amount)
        else:
            dept.card = add_money(dept.card, allocation.amount)

    if order.department is Department.BOX_OFFICE:
        if order.show_type is not None:
            show = acc.shows[order.show_type.value]
            show.sales = add_money(show.sales, order.total)
            show.orders += 1
            show.fees = add_money(show.fees, order.credit_card_fee)
            if order.payment_method is PaymentMethod.CASH:
                show.cash = add_money(show.cash, order.total)
            else:
                show.card = add_money(show.card, order.total)
        else:
            logger.debug("Box-office order %s has no show type", order.id)

    if order.user_id and order.user_name:
        user = acc.users.get(order.user_id)
        if user is None:
            user = _UserAcc(user_id=order.user_id, user_name=order.user_name)
            acc.users[order.user_id] = user
        user.sales = add_money(user.sales, order.total)
        user.orders += 1
        user.user_role = resolve_role(user.user_role, order.user_role)
    else:
        logger.debug("Order %s has no cashier attribution", order.id)


def _user_breakdown(acc: _Totals, settings: ReportSettings) -> list[UserSales]:
    users = []
    for user in acc.users.values():
        if user.sales <= 0:
            logger.debug("Dropping user %s with no sales", user.user_name)
            continue
        if not is_valid_real_user(user.user_name, settings.user_denylist, settings.denylist_match):
            logger.debug("Dropping placeholder account %r", user.user_name)
            continue
        users.append(
            UserSales(
                user_id=user.user_id,
                user_name=user.user_name,
                user_role=user.user_role,
                sales=user.sales,
                orders=user.orders,
            )
        )
    users.sort(key=lambda u: u.sales, reverse=True)
    return users


def aggregate(
    orders: Iterable[Order],
    business_date: str,
    *,
    settings: ReportSettings | None = None,
    is_ticket_category: Callable[[str], bool] = DEFAULT_TICKET_CATEGORIES,
    tz: tzinfo | None = None,
) -> NightlyReport:
    """Build the nightly report for a business date.

    This function:
    - does NOT mutate or drop any order from the input,
    - does NOT raise on malformed orders (they are counted in
      ``skipped_orders``),
    - MAY log progress via the logging module.

    Args:
        orders: Full order log or any slice of it.
        business_date: Business date to report on (YYYY-MM-DD).
        settings: Report settings (cutoff hour, top-products limit, user
            denylist). Defaults to ``ReportSettings()``.
        is_ticket_category: Predicate deciding whether a category is a ticket.
        tz: Optional venue timezone for aware timestamps.

    Returns:
        NightlyReport for the date.

    """
    settings = settings or ReportSettings()
    day_orders, skipped = select_business_day(orders, business_date, settings.cutoff_hour, tz)

    acc = _Totals(skipped=skipped)
    for order in day_orders:
        _add_order(acc, order, is_ticket_category)

    ranked = top_products(
        orders_to_item_frame(day_orders, is_ticket_category, settings.cutoff_hour, tz),
        settings.top_products_limit,
    )

    report = NightlyReport(
        date=business_date,
        total_sales=acc.sales,
        total_orders=acc.orders,
        cash_sales=acc.cash,
        card_sales=acc.card,
        credit_card_fees=acc.fees,
        department_breakdown={
            name: DepartmentSales(sales=d.sales, orders=d.orders, credit_card_fees=d.fees)
            for name, d in acc.departments.items()
        },
        show_breakdown={
            name: ShowSales(
                sales=s.sales,
                orders=s.orders,
                cash_sales=s.cash,
                card_sales=s.card,
                credit_card_fees=s.fees,
            )
            for name, s in acc.shows.items()
        },
        payment_breakdown={
            name: PaymentSplit(cash=d.cash, card=d.card) for name, d in acc.departments.items()
        },
        user_breakdown=_user_breakdown(acc, settings),
        top_products=[
            TopProduct(
                product_id=str(row.product_id),
                name=str(row.name),
                quantity_sold=int(row.quantity_sold),
                revenue=float(row.revenue),
            )
            for row in ranked.itertuples(index=False)
        ],
        skipped_orders=acc.skipped,
    )

    logger.info(
        f"Nightly report {business_date}: {report.total_orders} orders, "
        f"sales {report.total_sales:.2f} (cash {report.cash_sales:.2f}, "
        f"card {report.card_sales:.2f}), {report.skipped_orders} skipped"
    )
    return report
