"""
In-memory category layout and its conversion to/from the persisted config.

``CategoryLayout`` is one kind's categories plus display order.
``BoardConfig`` bundles the skill layout, the slash-command layout and the
``load_slash_commands`` switch; it is what the engine owns and what gets
written back through the backend.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..config.schema import CategoryConfig
from .ordered import CategoryMap


def default_target_category(order: Sequence[str]) -> str | None:
    """Category that receives orphaned units and units of removed categories.

    Policy: the first category in display order. None when there is none.
    """
    return order[0] if order else None


@dataclass
class CategoryLayout:
    categories: CategoryMap = field(default_factory=CategoryMap)
    order: list[str] = field(default_factory=list)

    def display_order(self) -> list[str]:
        """Stored order, or the key order when no order was stored."""
        return list(self.order) if self.order else self.categories.keys()

    def copy(self) -> "CategoryLayout":
        return CategoryLayout(categories=self.categories.copy(), order=list(self.order))

    def category_of(self, unit_name: str) -> str | None:
        """First category (in mapping order) that lists ``unit_name``."""
        for name, members in self.categories.items():
            if unit_name in members:
                return name
        return None


@dataclass
class BoardConfig:
    skills: CategoryLayout = field(default_factory=CategoryLayout)
    commands: CategoryLayout = field(default_factory=CategoryLayout)
    load_slash_commands: bool = True

    def to_persisted(self) -> CategoryConfig:
        return CategoryConfig(
            categories=self.skills.categories.to_dict(),
            category_order=list(self.skills.order),
            load_slash_commands=self.load_slash_commands,
            command_categories=self.commands.categories.to_dict(),
            command_category_order=list(self.commands.order),
        )

    def to_json_dict(self) -> dict[str, Any]:
        """JSON shape written to disk (camelCase keys)."""
        return self.to_persisted().model_dump(by_alias=True)
