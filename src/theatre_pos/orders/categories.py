"""Ticket category registry.

Deciding whether a line item is a ticket is the one question the classifier
asks about categories. The answer comes from a single registry: the built-in
``tickets`` category plus any custom categories flagged as tickets (season
passes, gift admissions, ...), so adding a category never touches
aggregation code.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from theatre_pos.exceptions import ConfigError

BUILTIN_TICKET_CATEGORIES = frozenset({"tickets"})


@dataclass(frozen=True)
class CategoryInfo:
    """A product category as configured on the tablets.

    Attributes:
        id: Category id stored on line items.
        name: Short name.
        display_name: Name shown on screen.
        is_ticket: Whether items in this category are admissions.
    """

    id: str
    name: str
    display_name: str
    is_ticket: bool = False


class TicketCategoryRegistry:
    """Answers ``is_ticket_category(category_id)`` for the classifier.

    Example:
        >>> registry = TicketCategoryRegistry.with_custom(["season-pass"])
        >>> registry.is_ticket_category("tickets")
        True
        >>> registry.is_ticket_category("season-pass")
        True
        >>> registry.is_ticket_category("concessions")
        False

    """

    def __init__(self, categories: Iterable[CategoryInfo] = ()) -> None:
        self._categories: dict[str, CategoryInfo] = {}
        for category in categories:
            self._categories[category.id] = category
        self._ticket_ids = BUILTIN_TICKET_CATEGORIES | {
            c.id for c in self._categories.values() if c.is_ticket
        }

    @classmethod
    def with_custom(cls, ticket_category_ids: Iterable[str]) -> TicketCategoryRegistry:
        """Registry with extra ticket categories given only by id."""
        return cls(
            CategoryInfo(id=cid, name=cid, display_name=cid, is_ticket=True)
            for cid in ticket_category_ids
        )

    @classmethod
    def from_json(cls, path: str | Path) -> TicketCategoryRegistry:
        """Load custom categories from a JSON list.

        Each entry needs an ``id``; ``name``, ``display_name`` and
        ``is_ticket`` are optional.

        Raises:
            ConfigError: If the file cannot be read or an entry is invalid.
        """
        if isinstance(path, str):
            path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not load categories from {path}: {e}") from e
        if not isinstance(data, list):
            raise ConfigError(f"Categories file {path} must contain a JSON list")

        categories = []
        for rec in data:
            if not isinstance(rec, dict) or not rec.get("id"):
                raise ConfigError(f"Invalid category entry in {path}: {rec!r}")
            cid = str(rec["id"])
            name = str(rec.get("name") or cid)
            categories.append(
                CategoryInfo(
                    id=cid,
                    name=name,
                    display_name=str(rec.get("display_name") or rec.get("displayName") or name),
                    is_ticket=bool(rec.get("is_ticket", False)),
                )
            )
        return cls(categories)

    def is_ticket_category(self, category_id: str) -> bool:
        return category_id in self._ticket_ids

    def __call__(self, category_id: str) -> bool:
        return self.is_ticket_category(category_id)

    def list_ticket_categories(self) -> list[str]:
        return sorted(self._ticket_ids)

    def get(self, category_id: str) -> CategoryInfo | None:
        return self._categories.get(category_id)


DEFAULT_TICKET_CATEGORIES = TicketCategoryRegistry()
