"""Money helpers shared by the classifier, aggregator and verifier.

Amounts are plain floats in currency units. Every accumulation is rounded to
cents after each addition so binary drift cannot build up across thousands
of orders.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")


def round_money(value: float) -> float:
    """Round an amount to cents, halves away from zero.

    Examples:
        >>> round_money(10.005)
        10.01
        >>> round_money(2.675)
        2.68

    """
    return float(Decimal(repr(float(value))).quantize(CENTS, rounding=ROUND_HALF_UP))


def add_money(total: float, amount: float) -> float:
    """Add an amount to a running total and round the result to cents."""
    return round_money(total + amount)


def is_money(value: object) -> bool:
    """True if value is a finite real number usable as an amount."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
