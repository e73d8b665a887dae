"""
Core -- category layout, reconciliation and the curation engine.
"""

from .engine import BatchResult, CurationEngine, LoadError, RelocationOutcome
from .layout import BoardConfig, CategoryLayout, default_target_category
from .ordered import CategoryMap
from .reconcile import complete_order, find_orphans, reconcile, reconcile_layout
from .store import UnitStore, enabled_counts, filter_units, unit_counts, units_in_category

__all__ = [
    "BatchResult",
    "BoardConfig",
    "CategoryLayout",
    "CategoryMap",
    "CurationEngine",
    "LoadError",
    "RelocationOutcome",
    "UnitStore",
    "complete_order",
    "default_target_category",
    "enabled_counts",
    "filter_units",
    "find_orphans",
    "reconcile",
    "reconcile_layout",
    "unit_counts",
    "units_in_category",
]
