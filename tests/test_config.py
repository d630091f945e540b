"""Tests for settings, storage keys and the ticket category registry."""

import json

import pytest

from theatre_pos.config import DEFAULT_USER_DENYLIST, ReportSettings, StorageKeys
from theatre_pos.exceptions import ConfigError, TheatrePosError
from theatre_pos.orders.categories import TicketCategoryRegistry


def test_default_settings() -> None:
    settings = ReportSettings()

    assert settings.cutoff_hour == 2
    assert settings.retention_days == 14
    assert settings.tolerance == 0.01
    assert settings.top_products_limit == 10
    assert settings.denylist_match == "exact"
    assert settings.credit_card_fee_percent is None
    assert "test user" in settings.user_denylist


@pytest.mark.parametrize(
    "kwargs",
    [
        {"cutoff_hour": 24},
        {"cutoff_hour": -1},
        {"retention_days": -1},
        {"tolerance": -0.01},
        {"top_products_limit": -5},
        {"denylist_match": "fuzzy"},
        {"credit_card_fee_percent": "5"},
        {"credit_card_fee_percent": -1},
        {"credit_card_fee_percent": float("nan")},
        {"retention_days": "14"},
        {"tolerance": "0.01"},
        {"user_denylist": "test user"},
    ],
)
def test_invalid_settings(kwargs) -> None:
    with pytest.raises(ConfigError):
        ReportSettings(**kwargs)


def test_config_error_is_package_error() -> None:
    with pytest.raises(TheatrePosError):
        ReportSettings(cutoff_hour=30)


def test_from_dict() -> None:
    settings = ReportSettings.from_dict(
        {"retention_days": 30, "user_denylist": ["  Front Desk ", "TEST USER"]}
    )

    assert settings.retention_days == 30
    assert settings.user_denylist == ("front desk", "test user")


def test_from_dict_rejects_bad_fee_percent() -> None:
    with pytest.raises(ConfigError, match="credit_card_fee_percent"):
        ReportSettings.from_dict({"credit_card_fee_percent": "5"})


def test_denylist_normalized_on_construction() -> None:
    settings = ReportSettings(user_denylist=("  Front Desk ", "TEST USER"))

    assert settings.user_denylist == ("front desk", "test user")


def test_from_dict_rejects_unknown_keys() -> None:
    with pytest.raises(ConfigError, match="retention"):
        ReportSettings.from_dict({"retention": 14})


def test_from_json(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"cutoff_hour": 3, "credit_card_fee_percent": 5.0}))

    settings = ReportSettings.from_json(path)

    assert settings.cutoff_hour == 3
    assert settings.credit_card_fee_percent == 5.0
    assert settings.user_denylist == DEFAULT_USER_DENYLIST


def test_from_json_errors(tmp_path) -> None:
    with pytest.raises(ConfigError):
        ReportSettings.from_json(tmp_path / "missing.json")

    path = tmp_path / "list.json"
    path.write_text("[1, 2]")
    with pytest.raises(ConfigError):
        ReportSettings.from_json(path)


def test_to_dict_roundtrip() -> None:
    settings = ReportSettings(retention_days=7, denylist_match="substring")

    assert ReportSettings.from_dict(settings.to_dict()) == settings


def test_storage_keys() -> None:
    keys = StorageKeys()

    assert keys.report_key("2025-01-15") == "nightly_report_2025-01-15"
    assert keys.last_processed == "last_nightly_process_date"
    assert keys.last_clean == "last_auto_clean_date"
    assert StorageKeys(report_prefix="r_").report_key("2025-01-15") == "r_2025-01-15"


def test_category_registry_defaults() -> None:
    registry = TicketCategoryRegistry()

    assert registry("tickets") is True
    assert registry("concessions") is False
    assert registry.list_ticket_categories() == ["tickets"]


def test_category_registry_from_json(tmp_path) -> None:
    path = tmp_path / "categories.json"
    path.write_text(
        json.dumps(
            [
                {"id": "season-passes", "name": "Passes", "is_ticket": True},
                {"id": "candy", "displayName": "Candy & Sweets"},
            ]
        )
    )
    registry = TicketCategoryRegistry.from_json(path)

    assert registry.is_ticket_category("season-passes") is True
    assert registry.is_ticket_category("candy") is False
    assert registry.list_ticket_categories() == ["season-passes", "tickets"]
    assert registry.get("candy").display_name == "Candy & Sweets"
    assert registry.get("nope") is None


def test_category_registry_rejects_bad_entries(tmp_path) -> None:
    path = tmp_path / "categories.json"
    path.write_text(json.dumps([{"name": "no id"}]))

    with pytest.raises(ConfigError):
        TicketCategoryRegistry.from_json(path)
