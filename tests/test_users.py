"""Tests for cashier attribution helpers."""

import pytest

from theatre_pos.reports.users import is_valid_real_user, resolve_role, role_rank


@pytest.mark.parametrize(
    "current, candidate, expected",
    [
        ("staff", "manager", "manager"),
        ("manager", "staff", "manager"),
        ("usher", "admin", "admin"),
        ("admin", "admin", "admin"),
        (None, "usher", "usher"),
        ("usher", None, "usher"),
        ("usher", "cashier", "usher"),
        ("cashier", "usher", "usher"),
        ("cashier", "volunteer", "cashier"),
    ],
)
def test_resolve_role(current, candidate, expected) -> None:
    assert resolve_role(current, candidate) == expected


def test_role_rank() -> None:
    assert role_rank("admin") > role_rank("manager") > role_rank("staff") > role_rank("usher")
    assert role_rank("Manager ") == role_rank("manager")
    assert role_rank("projectionist") == 0
    assert role_rank(None) == 0


def test_exact_denylist_match() -> None:
    assert is_valid_real_user("Test User") is False
    assert is_valid_real_user("  TEST USER ") is False
    assert is_valid_real_user("Test Userson") is True
    assert is_valid_real_user("Alice Smith") is True


def test_substring_denylist_match() -> None:
    assert is_valid_real_user("Test Userson", match="substring") is False
    assert is_valid_real_user("Alice Smith", match="substring") is True


def test_digits_and_empty_names_rejected() -> None:
    assert is_valid_real_user("12345") is False
    assert is_valid_real_user("") is False
    assert is_valid_real_user("   ") is False
    assert is_valid_real_user(None) is False
    assert is_valid_real_user("Usher 2") is True


def test_custom_denylist() -> None:
    assert is_valid_real_user("Front Desk", denylist=("front desk",)) is False
    assert is_valid_real_user("Test User", denylist=("front desk",)) is True


def test_mixed_case_denylist() -> None:
    assert is_valid_real_user("front desk", denylist=("  Front Desk ",)) is False
    assert is_valid_real_user("Front Desk 2", denylist=("FRONT DESK",), match="substring") is False
