"""Shared fixtures for the test suite."""

from __future__ import annotations

from datetime import datetime

import pytest
from builders import make_order, popcorn, ticket

from theatre_pos.orders.models import Department, Order, PaymentMethod, ShowType


@pytest.fixture
def mixed_order() -> Order:
    """Candy-counter card order: $10 ticket and $8 popcorn with a $0.90 fee."""
    return make_order(
        "mixed-1",
        [ticket(10.0), popcorn(8.0)],
        payment_method=PaymentMethod.CARD,
        fee=0.90,
    )


@pytest.fixture
def matinee_order() -> Order:
    """Box-office cash order of $25 for the matinee."""
    return make_order(
        "bo-1",
        [ticket(12.5, quantity=2)],
        department=Department.BOX_OFFICE,
        show_type=ShowType.MATINEE,
        timestamp=datetime(2025, 1, 15, 13, 0),
    )
