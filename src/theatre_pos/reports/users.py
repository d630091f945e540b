"""Staff attribution helpers for the user breakdown."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from theatre_pos.config import DEFAULT_USER_DENYLIST
from theatre_pos.orders.models import UserRole

logger = logging.getLogger(__name__)

# Highest first; anything not listed ranks below usher.
ROLE_PRIORITY = {
    UserRole.ADMIN.value: 4,
    UserRole.MANAGER.value: 3,
    UserRole.STAFF.value: 2,
    UserRole.USHER.value: 1,
}

_DIGITS_ONLY_RE = re.compile(r"^\d+$")


def role_rank(role: str | None) -> int:
    """Priority of a role; unrecognized or missing roles rank 0."""
    if not role:
        return 0
    return ROLE_PRIORITY.get(role.strip().lower(), 0)


def resolve_role(current: str | None, candidate: str | None) -> str | None:
    """Keep whichever of two roles has the higher priority.

    Ties keep ``current``, so the first role seen wins among equals.

    Examples:
        >>> resolve_role("staff", "manager")
        'manager'
        >>> resolve_role("manager", "staff")
        'manager'
        >>> resolve_role(None, "cashier")
        'cashier'

    """
    if current is None:
        return candidate
    if candidate is None:
        return current
    if role_rank(candidate) > role_rank(current):
        return candidate
    return current


def is_valid_real_user(
    user_name: str | None,
    denylist: Iterable[str] = DEFAULT_USER_DENYLIST,
    match: str = "exact",
) -> bool:
    """Check that a cashier name belongs to a real account.

    Rejects empty names, names made only of digits, and placeholder names from
    ``denylist``. With ``match="exact"`` only whole-name matches are rejected
    ("Test User" is rejected, "Test Userson" is kept); with
    ``match="substring"`` any name containing a denylisted phrase is rejected.

    Args:
        user_name: Name stored on the orders.
        denylist: Placeholder names, compared case-insensitively.
        match: ``"exact"`` or ``"substring"``.

    Returns:
        True if the name should appear in the user breakdown.

    """
    if not isinstance(user_name, str):
        return False

    name = user_name.lower().strip()
    if not name or _DIGITS_ONLY_RE.match(name):
        return False

    patterns = {pattern.lower().strip() for pattern in denylist}
    if match == "substring":
        denied = any(pattern in name for pattern in patterns if pattern)
    else:
        denied = name in patterns

    if denied:
        logger.debug("User %r matches a placeholder account name", user_name)
    return not denied
