"""
CategoryMap -- explicit ordered mapping of category name -> unit names.

Stored as a list of ``(name, members)`` slots plus a name -> slot index,
so renames keep their position and iteration order never depends on
dict insertion semantics.
"""

from collections.abc import Iterable, Iterator, Mapping


class CategoryMap:
    """Ordered, mutable mapping of category names to unit-name lists."""

    def __init__(self, items: Iterable[tuple[str, Iterable[str]]] = ()) -> None:
        self._slots: list[tuple[str, list[str]]] = []
        self._index: dict[str, int] = {}
        for name, members in items:
            self[name] = list(members)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]] | None) -> "CategoryMap":
        return cls((mapping or {}).items())

    # ── Mapping protocol ─────────────────────────────────────────────────

    def __getitem__(self, name: str) -> list[str]:
        return self._slots[self._index[name]][1]

    def __setitem__(self, name: str, members: list[str]) -> None:
        if name in self._index:
            self._slots[self._index[name]] = (name, members)
        else:
            self._index[name] = len(self._slots)
            self._slots.append((name, members))

    def __delitem__(self, name: str) -> None:
        position = self._index.pop(name)
        del self._slots[position]
        for offset, (key, _) in enumerate(self._slots[position:], start=position):
            self._index[key] = offset

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._slots)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CategoryMap):
            return NotImplemented
        return self._slots == other._slots

    def __repr__(self) -> str:
        return f"CategoryMap({self.to_dict()!r})"

    def get(self, name: str, default: list[str] | None = None) -> list[str] | None:
        if name in self._index:
            return self[name]
        return default

    def keys(self) -> list[str]:
        return [name for name, _ in self._slots]

    def items(self) -> list[tuple[str, list[str]]]:
        return list(self._slots)

    # ── Positional edits ─────────────────────────────────────────────────

    def rename(self, old: str, new: str) -> None:
        """Replace key ``old`` with ``new`` in place, keeping its members.

        If ``new`` already names another slot, that slot is replaced by the
        renamed one (mapping keys stay unique).
        """
        if old not in self._index or old == new:
            return
        if new in self._index:
            del self[new]
        position = self._index.pop(old)
        self._slots[position] = (new, self._slots[position][1])
        self._index[new] = position

    def copy(self) -> "CategoryMap":
        """Deep-enough copy: new slots and new member lists."""
        return CategoryMap((name, list(members)) for name, members in self._slots)

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(members) for name, members in self._slots}
