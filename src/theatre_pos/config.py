"""Unified configuration for the nightly reporting core.

This module provides the settings used by the aggregator, the verifier and
the lifecycle manager, plus the names of every persistence key.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path

from theatre_pos.exceptions import ConfigError
from theatre_pos.utils import is_money

DEFAULT_USER_DENYLIST = (
    "test user",
    "demo user",
    "default user",
    "guest user",
    "sample user",
    "example user",
    "temp user",
    "temporary user",
    "system user",
    "pos user",
    "staff member",
    "test account",
    "demo account",
)

DENYLIST_MATCH_MODES = ("exact", "substring")


@dataclass(frozen=True)
class ReportSettings:
    """Settings for report generation, verification and retention.

    Attributes:
        cutoff_hour: Local hour before which a sale belongs to the previous
            business day.
        retention_days: Number of business days of orders and snapshots kept
            before the current one.
        tolerance: Currency tolerance for every reconciliation check.
        top_products_limit: Number of products kept in ``top_products``.
        user_denylist: Placeholder account names excluded from the staff
            breakdown (compared lowercased and stripped).
        denylist_match: ``"exact"`` or ``"substring"`` matching against
            ``user_denylist``.
        credit_card_fee_percent: Configured card surcharge. When set, the
            verifier also checks the implied fee rate of card sales.
    """

    cutoff_hour: int = 2
    retention_days: int = 14
    tolerance: float = 0.01
    top_products_limit: int = 10
    user_denylist: tuple[str, ...] = DEFAULT_USER_DENYLIST
    denylist_match: str = "exact"
    credit_card_fee_percent: float | None = None

    def __post_init__(self) -> None:
        for name in ("cutoff_hour", "retention_days", "top_products_limit"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
        if not is_money(self.tolerance):
            raise ConfigError(f"tolerance must be a number, got {self.tolerance!r}")
        if not 0 <= self.cutoff_hour <= 23:
            raise ConfigError(f"cutoff_hour must be between 0 and 23, got {self.cutoff_hour}")
        if self.retention_days < 0:
            raise ConfigError(f"retention_days must be >= 0, got {self.retention_days}")
        if self.tolerance < 0:
            raise ConfigError(f"tolerance must be >= 0, got {self.tolerance}")
        if self.top_products_limit < 0:
            raise ConfigError(
                f"top_products_limit must be >= 0, got {self.top_products_limit}"
            )
        if self.denylist_match not in DENYLIST_MATCH_MODES:
            raise ConfigError(
                f"Invalid denylist_match '{self.denylist_match}'. "
                f"Must be one of {DENYLIST_MATCH_MODES}."
            )
        fee = self.credit_card_fee_percent
        if fee is not None and (not is_money(fee) or fee < 0):
            raise ConfigError(f"credit_card_fee_percent must be a number >= 0, got {fee!r}")
        if isinstance(self.user_denylist, str):
            raise ConfigError("user_denylist must be a list of names, not a string")
        object.__setattr__(
            self,
            "user_denylist",
            tuple(str(name).lower().strip() for name in self.user_denylist),
        )

    @classmethod
    def from_dict(cls, data: dict) -> ReportSettings:
        """Create settings from a dictionary, rejecting unknown keys.

        Raises:
            ConfigError: If a key is unknown or a value is invalid.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown report settings: {unknown}")

        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigError(f"Invalid report settings: {e}") from e

    @classmethod
    def from_json(cls, path: str | Path) -> ReportSettings:
        """Load settings from a JSON file.

        Examples:
            >>> settings = ReportSettings.from_json("config/report_settings.json")
            >>> settings.retention_days
            14
        """
        if isinstance(path, str):
            path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not load report settings from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Report settings in {path} must be a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        """Convert settings to a dictionary for JSON serialization."""
        data = asdict(self)
        data["user_denylist"] = list(self.user_denylist)
        return data


@dataclass(frozen=True)
class StorageKeys:
    """Names of every key the lifecycle manager reads or writes."""

    orders: str = "pos_orders"
    saved_reports: str = "saved_nightly_reports"
    last_processed: str = "last_nightly_process_date"
    last_clean: str = "last_auto_clean_date"
    clean_log: str = "last_auto_clean_log"
    last_error: str = "last_lifecycle_error"
    report_prefix: str = "nightly_report_"

    def report_key(self, business_date: str) -> str:
        """Key of the persisted snapshot for a business date.

        Examples:
            >>> StorageKeys().report_key("2025-01-15")
            'nightly_report_2025-01-15'
        """
        return f"{self.report_prefix}{business_date}"
