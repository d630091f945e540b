"""Nightly report value types.

A :class:`NightlyReport` is a pure aggregate over one business date's orders.
All of its parts are frozen; breakdown mappings are read-only views.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from theatre_pos.utils import round_money


@dataclass(frozen=True)
class DepartmentSales:
    """Revenue attributed to one report department.

    ``orders`` counts allocations, so a mixed order counts once for
    after-closing tickets and once for concessions.
    """

    sales: float = 0.0
    orders: int = 0
    credit_card_fees: float = 0.0

    @property
    def net_sales(self) -> float:
        return round_money(self.sales - self.credit_card_fees)

    def to_dict(self) -> dict:
        return {
            "sales": self.sales,
            "orders": self.orders,
            "credit_card_fees": self.credit_card_fees,
        }

    @classmethod
    def from_dict(cls, data: dict) -> DepartmentSales:
        return cls(
            sales=float(data.get("sales", 0.0)),
            orders=int(data.get("orders", 0)),
            credit_card_fees=float(data.get("credit_card_fees", 0.0)),
        )


@dataclass(frozen=True)
class ShowSales:
    """Box-office revenue for one show, from whole orders."""

    sales: float = 0.0
    orders: int = 0
    cash_sales: float = 0.0
    card_sales: float = 0.0
    credit_card_fees: float = 0.0

    def to_dict(self) -> dict:
        return {
            "sales": self.sales,
            "orders": self.orders,
            "cash_sales": self.cash_sales,
            "card_sales": self.card_sales,
            "credit_card_fees": self.credit_card_fees,
        }

    @classmethod
    def from_dict(cls, data: dict) -> ShowSales:
        return cls(
            sales=float(data.get("sales", 0.0)),
            orders=int(data.get("orders", 0)),
            cash_sales=float(data.get("cash_sales", 0.0)),
            card_sales=float(data.get("card_sales", 0.0)),
            credit_card_fees=float(data.get("credit_card_fees", 0.0)),
        )


@dataclass(frozen=True)
class PaymentSplit:
    """Cash and card revenue attributed to one report department."""

    cash: float = 0.0
    card: float = 0.0

    @property
    def total(self) -> float:
        return round_money(self.cash + self.card)

    def to_dict(self) -> dict:
        return {"cash": self.cash, "card": self.card}

    @classmethod
    def from_dict(cls, data: dict) -> PaymentSplit:
        return cls(cash=float(data.get("cash", 0.0)), card=float(data.get("card", 0.0)))


@dataclass(frozen=True)
class UserSales:
    """Whole-order sales processed by one cashier."""

    user_id: str
    user_name: str
    user_role: str | None
    sales: float
    orders: int

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "user_name": self.user_name,
            "user_role": self.user_role,
            "sales": self.sales,
            "orders": self.orders,
        }

    @classmethod
    def from_dict(cls, data: dict) -> UserSales:
        return cls(
            user_id=str(data["user_id"]),
            user_name=str(data["user_name"]),
            user_role=data.get("user_role"),
            sales=float(data["sales"]),
            orders=int(data["orders"]),
        )


@dataclass(frozen=True)
class TopProduct:
    product_id: str
    name: str
    quantity_sold: int
    revenue: float

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "quantity_sold": self.quantity_sold,
            "revenue": self.revenue,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TopProduct:
        return cls(
            product_id=str(data["product_id"]),
            name=str(data["name"]),
            quantity_sold=int(data["quantity_sold"]),
            revenue=float(data["revenue"]),
        )


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class NightlyReport:
    """Aggregate of one business date's orders.

    Attributes:
        date: Business date (YYYY-MM-DD).
        total_sales: Sum of order totals.
        total_orders: Number of orders reconciled.
        cash_sales: Sum of cash order totals.
        card_sales: Sum of card order totals.
        credit_card_fees: Sum of card fees charged.
        department_breakdown: Report department -> attributed sales.
        show_breakdown: Show type -> box-office sales.
        payment_breakdown: Report department -> cash/card split.
        user_breakdown: Real cashiers with sales, highest sales first.
        top_products: Best-selling products by revenue.
        skipped_orders: Orders of the date left out because they were
            malformed.

    The scalar totals are computed from whole orders and are the reference
    the breakdowns reconcile against.
    """

    date: str
    total_sales: float = 0.0
    total_orders: int = 0
    cash_sales: float = 0.0
    card_sales: float = 0.0
    credit_card_fees: float = 0.0
    department_breakdown: Mapping[str, DepartmentSales] = field(default_factory=dict)
    show_breakdown: Mapping[str, ShowSales] = field(default_factory=dict)
    payment_breakdown: Mapping[str, PaymentSplit] = field(default_factory=dict)
    user_breakdown: tuple[UserSales, ...] = ()
    top_products: tuple[TopProduct, ...] = ()
    skipped_orders: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "department_breakdown", _frozen(self.department_breakdown))
        object.__setattr__(self, "show_breakdown", _frozen(self.show_breakdown))
        object.__setattr__(self, "payment_breakdown", _frozen(self.payment_breakdown))
        object.__setattr__(self, "user_breakdown", tuple(self.user_breakdown))
        object.__setattr__(self, "top_products", tuple(self.top_products))

    @property
    def net_sales(self) -> float:
        """Total sales minus card fees."""
        return round_money(self.total_sales - self.credit_card_fees)

    @property
    def average_order_value(self) -> float:
        if self.total_orders == 0:
            return 0.0
        return round_money(self.total_sales / self.total_orders)

    @property
    def has_activity(self) -> bool:
        """True if the date had any orders or sales worth keeping."""
        return self.total_orders > 0 or self.total_sales > 0

    def to_dict(self) -> dict:
        """Convert the report to a JSON-ready dictionary."""
        return {
            "date": self.date,
            "total_sales": self.total_sales,
            "total_orders": self.total_orders,
            "cash_sales": self.cash_sales,
            "card_sales": self.card_sales,
            "credit_card_fees": self.credit_card_fees,
            "department_breakdown": {
                k: v.to_dict() for k, v in self.department_breakdown.items()
            },
            "show_breakdown": {k: v.to_dict() for k, v in self.show_breakdown.items()},
            "payment_breakdown": {k: v.to_dict() for k, v in self.payment_breakdown.items()},
            "user_breakdown": [u.to_dict() for u in self.user_breakdown],
            "top_products": [p.to_dict() for p in self.top_products],
            "skipped_orders": self.skipped_orders,
        }

    @classmethod
    def from_dict(cls, data: dict) -> NightlyReport:
        """Rebuild a report from :meth:`to_dict` output."""
        return cls(
            date=str(data["date"]),
            total_sales=float(data.get("total_sales", 0.0)),
            total_orders=int(data.get("total_orders", 0)),
            cash_sales=float(data.get("cash_sales", 0.0)),
            card_sales=float(data.get("card_sales", 0.0)),
            credit_card_fees=float(data.get("credit_card_fees", 0.0)),
            department_breakdown={
                k: DepartmentSales.from_dict(v)
                for k, v in data.get("department_breakdown", {}).items()
            },
            show_breakdown={
                k: ShowSales.from_dict(v) for k, v in data.get("show_breakdown", {}).items()
            },
            payment_breakdown={
                k: PaymentSplit.from_dict(v)
                for k, v in data.get("payment_breakdown", {}).items()
            },
            user_breakdown=tuple(UserSales.from_dict(u) for u in data.get("user_breakdown", [])),
            top_products=tuple(TopProduct.from_dict(p) for p in data.get("top_products", [])),
            skipped_orders=int(data.get("skipped_orders", 0)),
        )
