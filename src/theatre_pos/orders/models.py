"""Order records as rung up at the terminals.

Orders are append-only snapshots: line items carry the price and category at
sale time, and ``subtotal``, ``credit_card_fee`` and ``total`` are stored as
charged, never recomputed from items.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from theatre_pos.exceptions import DataQualityError
from theatre_pos.utils import is_money

logger = logging.getLogger(__name__)


class Department(str, Enum):
    """Terminal a sale was rung up on."""

    BOX_OFFICE = "box-office"
    CANDY_COUNTER = "candy-counter"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"


class ShowType(str, Enum):
    FIRST_SHOW = "1st-show"
    SECOND_SHOW = "2nd-show"
    NIGHTLY_SHOW = "nightly-show"
    MATINEE = "matinee"


class UserRole(str, Enum):
    """Known staff roles. Orders store the role as free text."""

    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"
    USHER = "usher"


@dataclass(frozen=True)
class LineItem:
    """One cart line frozen at sale time.

    Attributes:
        product_id: Catalog id of the product.
        name: Product name at sale time.
        quantity: Units sold.
        unit_price: Price per unit at sale time.
        category: Category id at sale time (e.g. "tickets", "concessions").
    """

    product_id: str
    name: str
    quantity: int
    unit_price: float
    category: str

    @property
    def subtotal(self) -> float:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict) -> LineItem:
        """Build a line item from a flat record or a ``{"product": {...}}`` cart line.

        Raises:
            DataQualityError: If a required field is missing or invalid.
        """
        if not isinstance(data, dict):
            raise DataQualityError(f"Line item must be a mapping, got {type(data).__name__}")

        product = data.get("product")
        if isinstance(product, dict):
            source = {
                "product_id": product.get("id"),
                "name": product.get("name"),
                "unit_price": product.get("price"),
                "category": product.get("category"),
                "quantity": data.get("quantity"),
            }
        else:
            source = data

        product_id = source.get("product_id")
        if product_id is None or product_id == "":
            raise DataQualityError("Line item is missing product_id")

        quantity = source.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise DataQualityError(f"Line item {product_id} has invalid quantity: {quantity!r}")

        unit_price = source.get("unit_price")
        if not is_money(unit_price):
            raise DataQualityError(f"Line item {product_id} has invalid unit_price: {unit_price!r}")

        category = source.get("category")
        if not isinstance(category, str) or not category:
            raise DataQualityError(f"Line item {product_id} is missing category")

        return cls(
            product_id=str(product_id),
            name=str(source.get("name") or product_id),
            quantity=quantity,
            unit_price=float(unit_price),
            category=category,
        )


@dataclass(frozen=True)
class Order:
    """A completed sale. Reconciliation only ever reads these.

    Attributes:
        id: Unique, creation-ordered identifier.
        items: Line items in cart order.
        subtotal: Sum charged before the card fee.
        credit_card_fee: Card surcharge charged (0 for cash).
        total: Amount charged, ``subtotal + credit_card_fee``.
        timestamp: Creation instant.
        payment_method: Tender used for the whole order.
        department: Terminal that rang up the sale.
        is_after_closing: Tickets sold at the candy counter after the box
            office closed.
        user_id: Id of the cashier.
        user_name: Display name of the cashier.
        user_role: Role of the cashier at sale time, free text.
        show_type: Show the tickets were for (box office only).
    """

    id: str
    items: tuple[LineItem, ...]
    subtotal: float
    credit_card_fee: float
    total: float
    timestamp: datetime
    payment_method: PaymentMethod
    department: Department
    is_after_closing: bool = False
    user_id: str | None = None
    user_name: str | None = None
    user_role: str | None = None
    show_type: ShowType | None = None

    def to_dict(self) -> dict:
        """Convert the order to a JSON-ready dictionary."""
        return {
            "id": self.id,
            "items": [item.to_dict() for item in self.items],
            "subtotal": self.subtotal,
            "credit_card_fee": self.credit_card_fee,
            "total": self.total,
            "timestamp": self.timestamp.isoformat(),
            "payment_method": self.payment_method.value,
            "department": self.department.value,
            "is_after_closing": self.is_after_closing,
            "user_id": self.user_id,
            "user_name": self.user_name,
            "user_role": self.user_role,
            "show_type": self.show_type.value if self.show_type else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Order:
        """Create an order from a stored record.

        Accepts the snake_case layout written by :meth:`to_dict` as well as
        the camelCase layout of the tablet app's order log.

        Raises:
            DataQualityError: If the record cannot be turned into an order.
        """
        if not isinstance(data, dict):
            raise DataQualityError(f"Order record must be a mapping, got {type(data).__name__}")

        record = {_FIELD_ALIASES.get(key, key): value for key, value in data.items()}

        order_id = record.get("id")
        if order_id is None or order_id == "":
            raise DataQualityError("Order record is missing id")
        order_id = str(order_id)

        raw_items = record.get("items")
        if not isinstance(raw_items, list):
            raise DataQualityError(f"Order {order_id} has no items list")
        items = tuple(LineItem.from_dict(item) for item in raw_items)

        money = {}
        for name in ("subtotal", "total"):
            value = record.get(name)
            if not is_money(value):
                raise DataQualityError(f"Order {order_id} has invalid {name}: {value!r}")
            money[name] = float(value)
        fee = record.get("credit_card_fee")
        if fee is None:
            fee = 0.0
        if not is_money(fee):
            raise DataQualityError(f"Order {order_id} has invalid credit_card_fee: {fee!r}")

        return cls(
            id=order_id,
            items=items,
            subtotal=money["subtotal"],
            credit_card_fee=float(fee),
            total=money["total"],
            timestamp=_parse_timestamp(order_id, record.get("timestamp")),
            payment_method=_parse_enum(order_id, PaymentMethod, record.get("payment_method")),
            department=_parse_enum(order_id, Department, record.get("department")),
            is_after_closing=bool(record.get("is_after_closing", False)),
            user_id=_optional_str(record.get("user_id")),
            user_name=_optional_str(record.get("user_name")),
            user_role=_optional_str(record.get("user_role")),
            show_type=_parse_show_type(order_id, record.get("show_type")),
        )


_FIELD_ALIASES = {
    "creditCardFee": "credit_card_fee",
    "paymentMethod": "payment_method",
    "isAfterClosing": "is_after_closing",
    "userId": "user_id",
    "userName": "user_name",
    "userRole": "user_role",
    "showType": "show_type",
}


def _optional_str(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _parse_timestamp(order_id: str, value: object) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as e:
            raise DataQualityError(f"Order {order_id} has invalid timestamp: {value!r}") from e
    raise DataQualityError(f"Order {order_id} has invalid timestamp: {value!r}")


def record_timestamp(record: object) -> datetime | None:
    """Timestamp of a raw stored record, None if it has no readable one.

    Used for records that fail to parse as orders but still carry a date.
    """
    if not isinstance(record, dict):
        return None
    try:
        return _parse_timestamp(str(record.get("id")), record.get("timestamp"))
    except DataQualityError:
        return None


def _parse_enum(order_id: str, enum_cls: type[Enum], value: object):
    try:
        return enum_cls(value)
    except ValueError as e:
        raise DataQualityError(
            f"Order {order_id} has invalid {enum_cls.__name__}: {value!r}"
        ) from e


def _parse_show_type(order_id: str, value: object) -> ShowType | None:
    if value is None or value == "":
        return None
    try:
        return ShowType(value)
    except ValueError:
        logger.warning("Order %s has unknown show type %r, ignoring it", order_id, value)
        return None


def order_problem(order: Order) -> str | None:
    """Describe why an order cannot be reconciled, or None if it is usable.

    Orders built through :meth:`Order.from_dict` are already type-checked;
    this also covers orders constructed directly in code.
    """
    if not order.items:
        return "order has no items"
    for name in ("subtotal", "credit_card_fee", "total"):
        if not is_money(getattr(order, name)):
            return f"{name} is not a finite amount"
    if not isinstance(order.department, Department):
        return f"unknown department {order.department!r}"
    if not isinstance(order.payment_method, PaymentMethod):
        return f"unknown payment method {order.payment_method!r}"
    if not isinstance(order.timestamp, datetime):
        return "timestamp is not a datetime"
    for item in order.items:
        if not is_money(item.unit_price) or not is_money(item.quantity):
            return f"line item {item.product_id} has a non-numeric price or quantity"
    return None


@dataclass
class LoadedOrders:
    """Result of :func:`load_orders`.

    Attributes:
        orders: Orders that parsed cleanly, in input order.
        skipped: Number of records that could not be parsed.
        errors: One message per skipped record.
    """

    orders: list[Order] = field(default_factory=list)
    skipped: int = 0
    errors: list[str] = field(default_factory=list)


def load_orders(records: Iterable[dict]) -> LoadedOrders:
    """Parse stored order records, skipping the ones that are malformed."""
    result = LoadedOrders()
    for record in records:
        try:
            result.orders.append(Order.from_dict(record))
        except DataQualityError as e:
            logger.warning("Skipping malformed order record: %s", e)
            result.skipped += 1
            result.errors.append(str(e))
    if result.skipped:
        logger.info(
            f"Loaded {len(result.orders)} orders, skipped {result.skipped} malformed record(s)"
        )
    return result
