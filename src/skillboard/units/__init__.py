"""
Units -- skills and slash commands, their discovery and the filesystem backend.
"""

from .backend import BackendError, ProjectBackend, RelocationError, UnitBackend
from .discovery import discover, parse_description
from .models import Unit, UnitFile, UnitKind, UnitRoots

__all__ = [
    "BackendError",
    "ProjectBackend",
    "RelocationError",
    "Unit",
    "UnitBackend",
    "UnitFile",
    "UnitKind",
    "UnitRoots",
    "discover",
    "parse_description",
]
