"""
Unit models -- skills and slash commands as discovered on disk.

A unit's ``enabled`` flag mirrors which root its ``path`` lives under:
the enabled root (``.claude/skills``) or its disabled sibling
(``.claude/disabled-skills``). ``UnitRoots`` captures that pair.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Any


class UnitKind(str, Enum):
    SKILL = "skill"
    COMMAND = "command"


@dataclass(frozen=True)
class UnitFile:
    """Auxiliary file or folder shipped next to a skill's SKILL.md."""

    name: str
    path: str
    is_directory: bool = False


@dataclass(frozen=True)
class Unit:
    """A skill or slash command.

    ``name`` is unique within its kind. ``files`` is always empty for
    slash commands.
    """

    name: str
    description: str
    content: str
    path: str
    enabled: bool
    kind: UnitKind = UnitKind.SKILL
    files: tuple[UnitFile, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        data = asdict(self)
        data["kind"] = self.kind.value
        data["files"] = [asdict(f) for f in self.files]
        return data


@dataclass(frozen=True)
class UnitRoots:
    """The enabled/disabled sibling directories for one unit kind."""

    enabled: str
    disabled: str

    def relocate_path(self, path: str, enable: bool) -> str:
        """Rewrite ``path`` from one root to the other.

        Paths that do not live under the source root are returned unchanged,
        so relocating a path that is already in place is a no-op.
        """
        source, target = (
            (self.disabled, self.enabled) if enable else (self.enabled, self.disabled)
        )
        pure = PurePath(path)
        try:
            relative = pure.relative_to(source)
        except ValueError:
            return path
        return str(PurePath(target) / relative)
