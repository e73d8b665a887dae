"""
Reconciliation -- normalize a freshly loaded config against the units on disk.

Runs after every load. The stored config may have been edited by hand or
written by an older version, so nothing about its shape is trusted:

1. Category order is completed from the category keys (or derived from
   them when absent) and stripped of names that are not categories.
2. Category lists are copied verbatim; dangling names are kept.
3. Units that no category lists ("orphans") are appended to the default
   target category (see ``default_target_category``).
4. Without any category, orphans are dropped.

The result is deterministic and reconciling it again is a no-op.
"""

from collections.abc import Iterable, Mapping, Sequence

import structlog

from ..config.schema import CategoryConfig
from .layout import BoardConfig, CategoryLayout, default_target_category
from .ordered import CategoryMap

logger = structlog.get_logger()


def complete_order(categories: CategoryMap, stored_order: Sequence[str] | None) -> list[str]:
    """Return a duplicate-free permutation of ``categories`` keys.

    Starts from ``stored_order`` when non-empty, appends keys it misses and
    drops entries that are not keys.
    """
    order = list(stored_order) if stored_order else categories.keys()
    for key in categories.keys():
        if key not in order:
            order.append(key)

    seen: set[str] = set()
    result: list[str] = []
    for name in order:
        if name in categories and name not in seen:
            seen.add(name)
            result.append(name)
    return result


def find_orphans(unit_names: Iterable[str], categories: CategoryMap) -> list[str]:
    """Unit names not listed in any category, in discovery order."""
    listed = {name for _, members in categories.items() for name in members}
    orphans: list[str] = []
    for name in unit_names:
        if name not in listed and name not in orphans:
            orphans.append(name)
    return orphans


def reconcile_layout(
    unit_names: Sequence[str],
    categories: Mapping[str, Iterable[str]] | CategoryMap,
    stored_order: Sequence[str] | None,
) -> CategoryLayout:
    """Reconcile one kind's categories against its discovered unit names."""
    if isinstance(categories, CategoryMap):
        result = categories.copy()
    else:
        result = CategoryMap.from_mapping(categories)

    order = complete_order(result, stored_order)

    orphans = find_orphans(unit_names, result)
    target = default_target_category(order)
    if orphans and target is not None:
        result[target] = result[target] + orphans
        logger.debug("reconcile.orphans_assigned", category=target, units=orphans)
    elif orphans:
        logger.warning("reconcile.orphans_dropped", units=orphans)

    return CategoryLayout(categories=result, order=order)


def reconcile(
    skill_names: Sequence[str],
    command_names: Sequence[str],
    raw: CategoryConfig,
) -> BoardConfig:
    """Build the normalized ``BoardConfig`` for a freshly loaded state."""
    skills = reconcile_layout(skill_names, raw.categories, raw.category_order)
    commands = reconcile_layout(
        command_names, raw.command_categories, raw.command_category_order
    )
    logger.info(
        "reconcile.complete",
        skill_categories=len(skills.order),
        command_categories=len(commands.order),
    )
    return BoardConfig(
        skills=skills,
        commands=commands,
        load_slash_commands=raw.load_slash_commands,
    )
