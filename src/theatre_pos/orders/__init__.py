"""Order records and their item-line view.

Example:
    >>> from theatre_pos.orders import load_orders, orders_to_item_frame
    >>>
    >>> loaded = load_orders(records)
    >>> items = orders_to_item_frame(loaded.orders)
    >>> items.groupby("category")["line_subtotal"].sum()
"""

from theatre_pos.orders.categories import (
    DEFAULT_TICKET_CATEGORIES,
    CategoryInfo,
    TicketCategoryRegistry,
)
from theatre_pos.orders.frame import orders_to_item_frame, top_products
from theatre_pos.orders.models import (
    Department,
    LineItem,
    LoadedOrders,
    Order,
    PaymentMethod,
    ShowType,
    UserRole,
    load_orders,
    order_problem,
)

__all__ = [
    "DEFAULT_TICKET_CATEGORIES",
    "CategoryInfo",
    "Department",
    "LineItem",
    "LoadedOrders",
    "Order",
    "PaymentMethod",
    "ShowType",
    "TicketCategoryRegistry",
    "UserRole",
    "load_orders",
    "order_problem",
    "orders_to_item_frame",
    "top_products",
]
