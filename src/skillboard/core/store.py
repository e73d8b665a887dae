"""
Unit store and the read-only views derived from it.

The store holds one kind's discovered units. Views combine it with a
``CategoryLayout``; listed names without a matching unit (stale entries
left in the config) never count and never show up.
"""

from collections.abc import Callable, Iterable

from ..units.models import Unit, UnitKind
from .layout import CategoryLayout


class UnitStore:
    """Discovered units of one kind, in discovery order."""

    def __init__(self, kind: UnitKind, units: Iterable[Unit] = ()) -> None:
        self.kind = kind
        self._units: list[Unit] = list(units)

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self):
        return iter(self._units)

    def __contains__(self, name: object) -> bool:
        return any(u.name == name for u in self._units)

    @property
    def units(self) -> list[Unit]:
        return list(self._units)

    def names(self) -> list[str]:
        return [u.name for u in self._units]

    def get(self, name: str) -> Unit | None:
        for unit in self._units:
            if unit.name == name:
                return unit
        return None

    def replace(self, units: Iterable[Unit]) -> None:
        """Swap in a freshly discovered list. Old units are discarded, not patched."""
        self._units = list(units)

    def apply(self, transition: Callable[[list[Unit]], list[Unit]]) -> None:
        self._units = transition(list(self._units))

    def remove(self, name: str) -> Unit | None:
        unit = self.get(name)
        if unit is not None:
            self._units = [u for u in self._units if u.name != name]
        return unit

    def enabled_count(self) -> int:
        return sum(1 for u in self._units if u.enabled)


# ── Derived views ────────────────────────────────────────────────────────


def units_in_category(store: UnitStore, layout: CategoryLayout, category: str) -> list[Unit]:
    """Units listed under ``category``, in discovery order."""
    listed = set(layout.categories.get(category) or [])
    return [u for u in store if u.name in listed]


def unit_counts(store: UnitStore, layout: CategoryLayout) -> dict[str, int]:
    existing = set(store.names())
    return {
        category: sum(1 for name in members if name in existing)
        for category, members in layout.categories.items()
    }


def enabled_counts(store: UnitStore, layout: CategoryLayout) -> dict[str, int]:
    counts: dict[str, int] = {}
    for category, members in layout.categories.items():
        listed = set(members)
        counts[category] = sum(1 for u in store if u.enabled and u.name in listed)
    return counts


def filter_units(units: Iterable[Unit], query: str) -> list[Unit]:
    """Case-insensitive substring match on name or description.

    A blank query keeps every unit.
    """
    if not query.strip():
        return list(units)
    needle = query.lower()
    return [
        u for u in units
        if needle in u.name.lower() or needle in u.description.lower()
    ]
