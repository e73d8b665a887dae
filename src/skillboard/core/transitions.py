"""
Pure state transitions.

Every function here takes the current state and returns the next one
without touching the filesystem. The engine composes them with the
backend's side effects, so the transitions can be tested on their own.
"""

from collections.abc import Collection, Sequence

from ..units.models import Unit, UnitFile, UnitRoots
from .layout import CategoryLayout, default_target_category


# ── Units ────────────────────────────────────────────────────────────────


def relocate(unit: Unit, enabled: bool, roots: UnitRoots) -> Unit:
    """Unit as it looks after moving to the enabled or disabled root."""
    return Unit(
        name=unit.name,
        description=unit.description,
        content=unit.content,
        path=roots.relocate_path(unit.path, enabled),
        enabled=enabled,
        kind=unit.kind,
        files=tuple(
            UnitFile(
                name=f.name,
                path=roots.relocate_path(f.path, enabled),
                is_directory=f.is_directory,
            )
            for f in unit.files
        ),
    )


def set_enabled(
    units: Sequence[Unit],
    names: Collection[str],
    enabled: bool,
    roots: UnitRoots,
) -> list[Unit]:
    return [relocate(u, enabled, roots) if u.name in names else u for u in units]


# ── Categories ───────────────────────────────────────────────────────────


def without_unit(layout: CategoryLayout, unit_name: str) -> CategoryLayout:
    """Layout with ``unit_name`` removed from every category."""
    result = layout.copy()
    for name, members in result.categories.items():
        result.categories[name] = [m for m in members if m != unit_name]
    return result


def move_unit(layout: CategoryLayout, unit_name: str, target: str) -> CategoryLayout:
    """Remove ``unit_name`` everywhere, then append it to ``target``.

    An unknown ``target`` leaves the unit in no category.
    """
    result = without_unit(layout, unit_name)
    if target in result.categories:
        result.categories[target] = result.categories[target] + [unit_name]
    return result


def add_category(layout: CategoryLayout, name: str) -> CategoryLayout:
    if not name or name in layout.categories:
        return layout
    result = layout.copy()
    result.categories[name] = []
    result.order.append(name)
    return result


def rename_category(layout: CategoryLayout, old: str, new: str) -> CategoryLayout:
    """Rename ``old`` to ``new`` in place, keeping its position and members.

    No-op for an empty or unchanged ``new`` and for an unknown ``old``. Also
    a no-op when ``new`` already names another category: merging two
    categories is not a rename, so callers must pass an unused name.
    """
    if not new or old == new or old not in layout.categories or new in layout.categories:
        return layout
    result = layout.copy()
    result.categories.rename(old, new)
    result.order = [new if c == old else c for c in result.order]
    return result


def remove_category(layout: CategoryLayout, name: str) -> tuple[CategoryLayout, list[str]]:
    """Remove ``name`` and hand its units to the new default target category.

    Refused (layout returned unchanged, nothing moved) for the last
    remaining category or an unknown name.

    Returns:
        The next layout and the unit names that were reassigned.
    """
    if name not in layout.categories or len(layout.categories) <= 1:
        return layout, []

    result = layout.copy()
    moved = list(result.categories[name])
    del result.categories[name]
    result.order = [c for c in result.order if c != name]

    target = default_target_category(result.display_order())
    if target is not None:
        result.categories[target] = (result.categories.get(target) or []) + moved
    return result, moved


def reorder_categories(layout: CategoryLayout, new_order: Sequence[str]) -> CategoryLayout:
    """Replace the display order wholesale. ``new_order`` is not validated."""
    result = layout.copy()
    result.order = list(new_order)
    return result
