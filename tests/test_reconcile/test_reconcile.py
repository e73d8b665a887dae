"""
Tests for reconciliation and the ordered category map.

Covers:
- complete_order: derived order, completion, stale entries, duplicates
- find_orphans / reconcile_layout: orphan assignment, dangling names
- reconcile: both kinds, load_slash_commands passthrough, idempotence
- CategoryMap: insertion order, positional rename, deletion
"""

import pytest

from skillboard.config.schema import CategoryConfig
from skillboard.core.layout import CategoryLayout, default_target_category
from skillboard.core.ordered import CategoryMap
from skillboard.core.reconcile import (
    complete_order,
    find_orphans,
    reconcile,
    reconcile_layout,
)


def _map(**categories: list[str]) -> CategoryMap:
    return CategoryMap.from_mapping(categories)


# ── Tests: complete_order ────────────────────────────────────────────


class TestCompleteOrder:
    def test_derived_from_keys_when_absent(self):
        assert complete_order(_map(A=[], B=[], C=[]), None) == ["A", "B", "C"]

    def test_derived_from_keys_when_empty(self):
        assert complete_order(_map(A=[], B=[]), []) == ["A", "B"]

    def test_stored_order_wins(self):
        assert complete_order(_map(A=[], B=[], C=[]), ["C", "A", "B"]) == ["C", "A", "B"]

    def test_missing_keys_appended(self):
        assert complete_order(_map(A=[], B=[], C=[]), ["B"]) == ["B", "A", "C"]

    def test_entries_that_are_not_categories_dropped(self):
        assert complete_order(_map(A=[], B=[]), ["Gone", "B", "A"]) == ["B", "A"]

    def test_duplicates_dropped(self):
        assert complete_order(_map(A=[], B=[]), ["A", "B", "A"]) == ["A", "B"]

    def test_no_categories(self):
        assert complete_order(CategoryMap(), ["Ghost"]) == []


# ── Tests: orphans ───────────────────────────────────────────────────


class TestOrphans:
    def test_find_orphans_in_discovery_order(self):
        categories = _map(A=["s2"])
        assert find_orphans(["s3", "s1", "s2"], categories) == ["s3", "s1"]

    def test_find_orphans_deduplicates(self):
        assert find_orphans(["s1", "s1"], CategoryMap()) == ["s1"]

    def test_orphans_go_to_first_category(self):
        layout = reconcile_layout(["s1", "s2"], {"A": ["s1"], "B": []}, None)
        assert layout.categories["A"] == ["s1", "s2"]
        assert layout.categories["B"] == []
        assert layout.order == ["A", "B"]

    def test_orphans_follow_stored_order(self):
        layout = reconcile_layout(["s1"], {"A": [], "B": []}, ["B", "A"])
        assert layout.categories["B"] == ["s1"]
        assert layout.categories["A"] == []

    def test_orphans_dropped_without_categories(self):
        layout = reconcile_layout(["s1", "s2"], {}, None)
        assert len(layout.categories) == 0
        assert layout.order == []

    def test_dangling_names_kept(self):
        layout = reconcile_layout(["s1"], {"A": ["s1", "deleted-skill"]}, None)
        assert layout.categories["A"] == ["s1", "deleted-skill"]

    def test_unit_listed_anywhere_is_not_orphan(self):
        layout = reconcile_layout(["s1"], {"A": [], "B": ["s1"]}, None)
        assert layout.categories["A"] == []
        assert layout.categories["B"] == ["s1"]

    def test_input_mapping_not_mutated(self):
        categories = _map(A=[])
        reconcile_layout(["s1"], categories, None)
        assert categories["A"] == []

    def test_default_target_category(self):
        assert default_target_category(["B", "A"]) == "B"
        assert default_target_category([]) is None


# ── Tests: reconcile ─────────────────────────────────────────────────


class TestReconcile:
    def test_skills_and_commands_independent(self):
        raw = CategoryConfig(
            categories={"Docs": []},
            command_categories={"Git": ["commit"]},
        )
        board = reconcile(["pdf"], ["commit", "review"], raw)
        assert board.skills.categories["Docs"] == ["pdf"]
        assert board.commands.categories["Git"] == ["commit", "review"]

    def test_load_slash_commands_passed_through(self):
        raw = CategoryConfig(categories={"A": []}, load_slash_commands=False)
        assert reconcile([], [], raw).load_slash_commands is False

    def test_every_unit_listed_after_reconcile(self):
        raw = CategoryConfig(categories={"A": ["s1"], "B": ["s3"]}, category_order=["B"])
        names = ["s1", "s2", "s3", "s4"]
        board = reconcile(names, [], raw)
        listed = {n for _, members in board.skills.categories.items() for n in members}
        assert set(names) <= listed

    def test_order_is_permutation_of_keys(self):
        raw = CategoryConfig(
            categories={"A": [], "B": [], "C": []},
            category_order=["C", "X", "C"],
        )
        board = reconcile([], [], raw)
        assert sorted(board.skills.order) == sorted(board.skills.categories.keys())
        assert board.skills.order == ["C", "A", "B"]

    @pytest.mark.parametrize(
        "raw",
        [
            CategoryConfig(categories={"A": ["s1"], "B": []}),
            CategoryConfig(categories={"A": [], "B": ["ghost"]}, category_order=["B", "Nope"]),
            CategoryConfig(),
        ],
    )
    def test_idempotent(self, raw: CategoryConfig):
        names = ["s1", "s2", "s3"]
        once = reconcile(names, ["c1"], raw)
        twice = reconcile(names, ["c1"], once.to_persisted())
        assert twice.to_json_dict() == once.to_json_dict()

    def test_persisted_shape_uses_camel_case(self):
        board = reconcile(["s1"], [], CategoryConfig(categories={"A": []}))
        data = board.to_json_dict()
        assert data["categories"] == {"A": ["s1"]}
        assert data["categoryOrder"] == ["A"]
        assert data["loadSlashCommands"] is True
        assert "commandCategories" in data


# ── Tests: CategoryMap ───────────────────────────────────────────────


class TestCategoryMap:
    def test_preserves_insertion_order(self):
        m = _map(Z=[], A=[], M=[])
        assert m.keys() == ["Z", "A", "M"]

    def test_rename_keeps_position_and_members(self):
        m = _map(A=["x"], B=["y"], C=[])
        m.rename("B", "Beta")
        assert m.keys() == ["A", "Beta", "C"]
        assert m["Beta"] == ["y"]
        assert "B" not in m

    def test_delete_reindexes(self):
        m = _map(A=[], B=["y"], C=["z"])
        del m["A"]
        assert m.keys() == ["B", "C"]
        assert m["C"] == ["z"]

    def test_setitem_appends_new_and_replaces_existing(self):
        m = _map(A=[])
        m["B"] = ["x"]
        m["A"] = ["y"]
        assert m.items() == [("A", ["y"]), ("B", ["x"])]

    def test_copy_is_independent(self):
        m = _map(A=["x"])
        c = m.copy()
        c["A"] = c["A"] + ["y"]
        assert m["A"] == ["x"]

    def test_get_missing(self):
        assert _map(A=[]).get("B") is None

    def test_layout_display_order_falls_back_to_keys(self):
        layout = CategoryLayout(categories=_map(B=[], A=[]))
        assert layout.display_order() == ["B", "A"]
