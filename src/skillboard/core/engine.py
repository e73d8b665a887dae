"""
Curation engine -- owns the in-memory board and exposes the mutation API.

Every mutation is two independent steps:

1. A pure transition (``core.transitions``) applied synchronously to the
   in-memory state, so the caller sees the intended result immediately.
2. A side effect through the ``UnitBackend``: moving files for
   enable/disable, saving the category config after layout changes.

Enable/disable flips the in-memory unit first, then performs the move and
reports its outcome. A failed move never rolls the flip back; the next
reload re-derives ``enabled`` from disk.
Config saves are fire-and-forget on a single background worker and only
logged when they fail.

Each reload bumps ``generation``. A relocation that finishes after a newer
reload landed is reported as stale; the reloaded state is authoritative.
"""

from concurrent.futures import Future, ThreadPoolExecutor, as_completed, wait
from dataclasses import dataclass, field

import structlog

from ..config.schema import CategoryConfig
from ..logging.human import HumanLog
from ..units.backend import BackendError, UnitBackend
from ..units.models import Unit, UnitFile, UnitKind, UnitRoots
from . import transitions
from .layout import BoardConfig, CategoryLayout
from .reconcile import reconcile
from .store import UnitStore, enabled_counts, filter_units, unit_counts, units_in_category

logger = structlog.get_logger()


class LoadError(Exception):
    """Discovery or config loading failed; the board has no usable state."""


@dataclass(frozen=True)
class RelocationOutcome:
    """Result of moving one unit to the enabled or disabled root."""

    name: str
    enabled: bool
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    """Outcome of enabling or disabling every unit of a category."""

    category: str
    enabled: bool
    outcomes: list[RelocationOutcome] = field(default_factory=list)
    stale: bool = False

    @property
    def failures(self) -> list[RelocationOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return not self.failures


class CurationEngine:
    """Skills and slash commands grouped into categories, with enable/disable."""

    def __init__(self, backend: UnitBackend, max_relocation_workers: int = 4):
        self.backend = backend
        self.config = BoardConfig()
        self.selected_unit: Unit | None = None
        self.error: str | None = None
        self.loaded = False
        self.generation = 0

        self._stores = {kind: UnitStore(kind) for kind in UnitKind}
        self._roots: dict[UnitKind, UnitRoots] = {}
        self._selected_category = {kind: "" for kind in UnitKind}
        self._max_workers = max(1, max_relocation_workers)
        self._save_pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="skillboard-save")
        self._pending_saves: list[Future] = []
        self.hlog = HumanLog(logger)

    def __enter__(self) -> "CurationEngine":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Loading ──────────────────────────────────────────────────────────

    def reload(self) -> None:
        """Rediscover units, reload the config and reconcile them.

        The unit stores are replaced wholesale and the selection is
        re-derived, so anything computed against the previous state is
        superseded.

        Raises:
            LoadError: If discovery or config loading fails. ``error`` keeps
                the message until the next successful reload.
        """
        try:
            raw = self.backend.load_config()
            skills = self.backend.load_units()
            commands = self.backend.load_slash_commands() if raw.load_slash_commands else []
            roots = {kind: self.backend.roots(kind) for kind in UnitKind}
        except (BackendError, OSError, ValueError) as e:
            self.error = str(e)
            logger.error("engine.load_failed", error=str(e))
            raise LoadError(str(e)) from e

        self.error = None
        self.generation += 1
        self._roots = roots
        self._stores[UnitKind.SKILL].replace(skills)
        self._stores[UnitKind.COMMAND].replace(commands)
        self.config = reconcile(
            self._stores[UnitKind.SKILL].names(),
            self._stores[UnitKind.COMMAND].names(),
            raw,
        )

        for kind in UnitKind:
            categories = self.categories(kind)
            if self._selected_category[kind] not in categories:
                self._selected_category[kind] = categories[0] if categories else ""

        if self.selected_unit is not None:
            self.selected_unit = self._stores[self.selected_unit.kind].get(self.selected_unit.name)

        self.loaded = True
        self.hlog.reload_complete(skills=len(skills), commands=len(commands))

    # ── Persistence ──────────────────────────────────────────────────────

    def _persist(self) -> None:
        snapshot: CategoryConfig = self.config.to_persisted()
        self._pending_saves = [f for f in self._pending_saves if not f.done()]
        try:
            future = self._save_pool.submit(self.backend.save_config, snapshot)
        except RuntimeError as e:
            # pool already shut down by close()
            logger.warning("engine.config.save_failed", error=str(e))
            return
        future.add_done_callback(self._on_saved)
        self._pending_saves.append(future)

    @staticmethod
    def _on_saved(future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.warning("engine.config.save_failed", error=str(error))

    def flush(self, timeout: float | None = None) -> None:
        """Block until every queued config save has finished."""
        wait(list(self._pending_saves), timeout=timeout)

    def close(self) -> None:
        self.flush()
        self._save_pool.shutdown(wait=True)

    # ── Internal helpers ─────────────────────────────────────────────────

    def _layout(self, kind: UnitKind) -> CategoryLayout:
        return self.config.skills if kind is UnitKind.SKILL else self.config.commands

    def _set_layout(self, kind: UnitKind, layout: CategoryLayout) -> None:
        if kind is UnitKind.SKILL:
            self.config.skills = layout
        else:
            self.config.commands = layout
        self._persist()

    def _relocate(self, name: str, enable: bool, kind: UnitKind) -> RelocationOutcome:
        try:
            self.backend.relocate_unit(name, enable, kind)
        except (BackendError, OSError) as e:
            logger.warning("engine.relocation_failed", unit=name, kind=kind.value, error=str(e))
            return RelocationOutcome(name=name, enabled=enable, error=str(e))
        return RelocationOutcome(name=name, enabled=enable)

    def _relocate_many(self, names: list[str], enable: bool, kind: UnitKind) -> list[RelocationOutcome]:
        """Issue every move concurrently and settle all of them, keeping input order."""
        if not names:
            return []
        outcomes: list[RelocationOutcome | None] = [None] * len(names)
        with ThreadPoolExecutor(max_workers=min(len(names), self._max_workers)) as pool:
            futures = {
                pool.submit(self._relocate, name, enable, kind): i
                for i, name in enumerate(names)
            }
            for future in as_completed(futures):
                outcomes[futures[future]] = future.result()
        return outcomes  # type: ignore[return-value]

    def _apply_enabled(self, kind: UnitKind, names: set[str], enabled: bool) -> None:
        if not names:
            return
        roots = self._roots[kind]
        self._stores[kind].apply(lambda units: transitions.set_enabled(units, names, enabled, roots))
        selected = self.selected_unit
        if selected is not None and selected.kind is kind and selected.name in names:
            self.selected_unit = transitions.relocate(selected, enabled, roots)

    # ── Enable / disable ─────────────────────────────────────────────────

    def toggle_unit(self, name: str, kind: UnitKind = UnitKind.SKILL) -> RelocationOutcome | None:
        """Flip one unit between its enabled and disabled roots.

        The in-memory unit shows the new state before the move starts.

        Returns:
            The relocation outcome (check ``ok``), or None for an unknown unit.
            The local flip is kept even when the move failed.
        """
        unit = self._stores[kind].get(name)
        if unit is None:
            return None

        next_enabled = not unit.enabled
        self._apply_enabled(kind, {name}, next_enabled)

        generation = self.generation
        outcome = self._relocate(name, next_enabled, kind)
        if generation != self.generation:
            logger.info("engine.toggle.superseded", unit=name)
            return outcome

        self.hlog.unit_toggled(name, kind.value, next_enabled)
        return outcome

    def set_enabled_for_category(
        self,
        category: str,
        enabled: bool,
        kind: UnitKind = UnitKind.SKILL,
    ) -> BatchResult:
        """Enable or disable every unit listed under ``category``.

        Local state is updated for every listed unit before the moves start.
        Moves are attempted independently; one failure does not stop the
        rest and nothing is rolled back.
        """
        store = self._stores[kind]
        listed = self._layout(kind).categories.get(category) or []
        names = [name for name in dict.fromkeys(listed) if name in store]
        self._apply_enabled(kind, set(names), enabled)

        generation = self.generation
        result = BatchResult(
            category=category,
            enabled=enabled,
            outcomes=self._relocate_many(names, enabled, kind),
        )
        if generation != self.generation:
            result.stale = True
            logger.info("engine.batch.superseded", category=category)
            return result

        self.hlog.batch_complete(category, enabled, total=len(names), failed=len(result.failures))
        return result

    def enable_all_in_category(self, kind: UnitKind = UnitKind.SKILL) -> BatchResult:
        return self.set_enabled_for_category(self.selected_category(kind), True, kind)

    def disable_all_in_category(self, kind: UnitKind = UnitKind.SKILL) -> BatchResult:
        return self.set_enabled_for_category(self.selected_category(kind), False, kind)

    # ── Units ────────────────────────────────────────────────────────────

    def move_unit_to_category(self, name: str, category: str, kind: UnitKind = UnitKind.SKILL) -> None:
        """Make ``category`` the only category listing ``name``.

        An unknown category leaves the unit in none (it is picked up again
        as an orphan on the next reload).
        """
        layout = self._layout(kind)
        self._set_layout(kind, transitions.move_unit(layout, name, category))
        if category in layout.categories:
            self.hlog.unit_moved(name, kind.value, category)

    def delete_unit(self, name: str, kind: UnitKind = UnitKind.SKILL) -> str | None:
        """Delete a unit from disk and from the board.

        Returns:
            The backend error message, or None on success. The unit is
            removed from the board in both cases.
        """
        error = None
        try:
            self.backend.delete_unit(name, kind)
        except (BackendError, OSError) as e:
            error = str(e)
            logger.warning("engine.delete_failed", unit=name, kind=kind.value, error=error)

        self._stores[kind].remove(name)
        self._set_layout(kind, transitions.without_unit(self._layout(kind), name))
        if self.selected_unit is not None and self.selected_unit.kind is kind and self.selected_unit.name == name:
            self.selected_unit = None
        self.hlog.unit_deleted(name, kind.value)
        return error

    # ── Categories ───────────────────────────────────────────────────────

    def add_category(self, name: str, kind: UnitKind = UnitKind.SKILL) -> None:
        layout = self._layout(kind)
        updated = transitions.add_category(layout, name)
        if updated is layout:
            return
        self._set_layout(kind, updated)
        self.hlog.category_added(name)

    def rename_category(self, old: str, new: str, kind: UnitKind = UnitKind.SKILL) -> None:
        layout = self._layout(kind)
        updated = transitions.rename_category(layout, old, new)
        if updated is layout:
            return
        self._set_layout(kind, updated)
        if self._selected_category[kind] == old:
            self._selected_category[kind] = new
        self.hlog.category_renamed(old, new)

    def remove_category(self, name: str, kind: UnitKind = UnitKind.SKILL) -> None:
        """Remove a category; its units go to the new first category.

        The last remaining category cannot be removed (no-op).
        """
        layout = self._layout(kind)
        updated, moved = transitions.remove_category(layout, name)
        if updated is layout:
            return
        self._set_layout(kind, updated)
        remaining = updated.display_order()
        if self._selected_category[kind] == name:
            self._selected_category[kind] = remaining[0] if remaining else ""
        self.hlog.category_removed(name, moved=len(moved), target=remaining[0] if remaining else None)

    def reorder_categories(self, new_order: list[str], kind: UnitKind = UnitKind.SKILL) -> None:
        """Replace the category order. Callers pass a permutation of the current one."""
        self._set_layout(kind, transitions.reorder_categories(self._layout(kind), new_order))
        self.hlog.categories_reordered(list(new_order))

    def set_load_slash_commands(self, load: bool) -> None:
        """Switch slash-command loading. Turning it on takes effect on reload."""
        self.config.load_slash_commands = load
        if not load:
            self._stores[UnitKind.COMMAND].replace([])
            if self.selected_unit is not None and self.selected_unit.kind is UnitKind.COMMAND:
                self.selected_unit = None
        self._persist()

    # ── Selection ────────────────────────────────────────────────────────

    def selected_category(self, kind: UnitKind = UnitKind.SKILL) -> str:
        return self._selected_category[kind]

    def select_category(self, name: str, kind: UnitKind = UnitKind.SKILL) -> None:
        self._selected_category[kind] = name

    def select_unit(self, name: str, kind: UnitKind = UnitKind.SKILL) -> Unit | None:
        """Select a unit; selecting the already-selected one collapses it."""
        current = self.selected_unit
        if current is not None and current.kind is kind and current.name == name:
            self.selected_unit = None
        else:
            self.selected_unit = self._stores[kind].get(name)
        return self.selected_unit

    # ── Views ────────────────────────────────────────────────────────────

    def units(self, kind: UnitKind = UnitKind.SKILL) -> list[Unit]:
        return self._stores[kind].units

    def get_unit(self, name: str, kind: UnitKind = UnitKind.SKILL) -> Unit | None:
        return self._stores[kind].get(name)

    def categories(self, kind: UnitKind = UnitKind.SKILL) -> list[str]:
        return self._layout(kind).display_order()

    def category_of(self, name: str, kind: UnitKind = UnitKind.SKILL) -> str | None:
        return self._layout(kind).category_of(name)

    def units_in_category(self, category: str | None = None, kind: UnitKind = UnitKind.SKILL) -> list[Unit]:
        """Units of ``category`` (default: the selected one)."""
        if category is None:
            category = self._selected_category[kind]
        return units_in_category(self._stores[kind], self._layout(kind), category)

    def filtered_units(
        self,
        query: str,
        category: str | None = None,
        kind: UnitKind = UnitKind.SKILL,
    ) -> list[Unit]:
        return filter_units(self.units_in_category(category, kind), query)

    def unit_counts(self, kind: UnitKind = UnitKind.SKILL) -> dict[str, int]:
        return unit_counts(self._stores[kind], self._layout(kind))

    def enabled_counts(self, kind: UnitKind = UnitKind.SKILL) -> dict[str, int]:
        return enabled_counts(self._stores[kind], self._layout(kind))

    def total_units(self, kind: UnitKind = UnitKind.SKILL) -> int:
        return len(self._stores[kind])

    def enabled_units(self, kind: UnitKind = UnitKind.SKILL) -> int:
        return self._stores[kind].enabled_count()

    # ── Auxiliary files ──────────────────────────────────────────────────

    def read_file(self, path: str) -> str:
        return self.backend.read_file(path)

    def write_file(self, path: str, content: str) -> None:
        self.backend.write_file(path, content)

    def list_directory(self, path: str) -> list[UnitFile]:
        return self.backend.list_directory(path)
