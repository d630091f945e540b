"""Item-line view of the order log.

Flattens orders into a DataFrame with one row per line item, the atomic grain
for product-level analysis. The top-products ranking of the nightly report is
built on this frame.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import tzinfo

import pandas as pd

from theatre_pos.calendar import DEFAULT_CUTOFF_HOUR, business_date_of
from theatre_pos.orders.categories import DEFAULT_TICKET_CATEGORIES
from theatre_pos.orders.models import Order
from theatre_pos.utils import round_money

logger = logging.getLogger(__name__)

ITEM_COLUMNS = [
    "order_id",
    "business_date",
    "department",
    "payment_method",
    "user_id",
    "product_id",
    "name",
    "category",
    "is_ticket",
    "quantity",
    "unit_price",
    "line_subtotal",
]

TOP_PRODUCT_COLUMNS = ["product_id", "name", "quantity_sold", "revenue"]


def orders_to_item_frame(
    orders: Iterable[Order],
    is_ticket_category: Callable[[str], bool] = DEFAULT_TICKET_CATEGORIES,
    cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
    tz: tzinfo | None = None,
) -> pd.DataFrame:
    """Build the item-line DataFrame for a collection of orders.

    Args:
        orders: Orders to flatten.
        is_ticket_category: Predicate deciding whether a category is a ticket.
        cutoff_hour: Business-day cutoff hour used for ``business_date``.
        tz: Optional venue timezone for aware timestamps.

    Returns:
        DataFrame with columns ``ITEM_COLUMNS``, one row per line item, in
        order then cart sequence. ``line_subtotal`` is rounded to cents.

    """
    rows = []
    for order in orders:
        business_date = business_date_of(order.timestamp, cutoff_hour, tz)
        for item in order.items:
            rows.append(
                {
                    "order_id": order.id,
                    "business_date": business_date,
                    "department": order.department.value,
                    "payment_method": order.payment_method.value,
                    "user_id": order.user_id,
                    "product_id": item.product_id,
                    "name": item.name,
                    "category": item.category,
                    "is_ticket": bool(is_ticket_category(item.category)),
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "line_subtotal": round_money(item.subtotal),
                }
            )

    if not rows:
        return pd.DataFrame(columns=ITEM_COLUMNS)
    return pd.DataFrame(rows, columns=ITEM_COLUMNS)


def top_products(item_frame: pd.DataFrame, limit: int = 10) -> pd.DataFrame:
    """Rank products by revenue.

    Groups line items by product id, sums quantity and revenue, drops products
    with no revenue, sorts by revenue descending (ties keep first-sold order)
    and keeps the first ``limit`` rows.

    Args:
        item_frame: Output of :func:`orders_to_item_frame`.
        limit: Number of products to keep.

    Returns:
        DataFrame with columns ``TOP_PRODUCT_COLUMNS``.

    """
    if item_frame.empty or limit <= 0:
        return pd.DataFrame(columns=TOP_PRODUCT_COLUMNS)

    grouped = (
        item_frame.groupby("product_id", sort=False)
        .agg(
            name=("name", "first"),
            quantity_sold=("quantity", "sum"),
            revenue=("line_subtotal", "sum"),
        )
        .reset_index()
    )
    grouped["revenue"] = grouped["revenue"].map(round_money)
    grouped = grouped[grouped["revenue"] > 0]
    grouped = grouped.sort_values("revenue", ascending=False, kind="mergesort")

    logger.debug(f"Ranked {len(grouped)} products with revenue, keeping top {limit}")
    return grouped.head(limit)[TOP_PRODUCT_COLUMNS].reset_index(drop=True)
