"""
Unit backend -- the engine's window onto the filesystem.

``UnitBackend`` is the capability interface the engine depends on:
discovery, config persistence, relocation between enabled/disabled roots
and auxiliary-file access. ``ProjectBackend`` implements it over a
project's ``.claude`` directory.
"""

import json
import shutil
from pathlib import Path
from typing import Any, Protocol

import structlog
from pydantic import ValidationError

from ..config.schema import DEFAULT_CATEGORY, CategoryConfig
from .discovery import COMMAND_SUFFIX, discover, list_entries
from .models import Unit, UnitFile, UnitKind, UnitRoots

logger = structlog.get_logger()

CLAUDE_DIR = ".claude"
CONFIG_FILENAME = "skill-manager-config.json"

ROOT_NAMES: dict[UnitKind, tuple[str, str]] = {
    UnitKind.SKILL: ("skills", "disabled-skills"),
    UnitKind.COMMAND: ("commands", "disabled-commands"),
}


class BackendError(Exception):
    """A backend operation could not be carried out."""


class RelocationError(BackendError):
    """Moving a unit between its enabled and disabled roots failed."""

    def __init__(self, name: str, message: str):
        self.name = name
        super().__init__(f"Failed to move '{name}': {message}")


class UnitBackend(Protocol):
    """Capabilities the curation engine needs from its environment."""

    def roots(self, kind: UnitKind) -> UnitRoots: ...

    def load_units(self) -> list[Unit]: ...

    def load_slash_commands(self) -> list[Unit]: ...

    def load_config(self) -> CategoryConfig: ...

    def save_config(self, config: CategoryConfig) -> None: ...

    def relocate_unit(self, name: str, enable: bool, kind: UnitKind = UnitKind.SKILL) -> None: ...

    def delete_unit(self, name: str, kind: UnitKind = UnitKind.SKILL) -> None: ...

    def read_file(self, path: str) -> str: ...

    def write_file(self, path: str, content: str) -> None: ...

    def list_directory(self, path: str) -> list[UnitFile]: ...


class ProjectBackend:
    """Filesystem backend rooted at ``<project>/.claude``."""

    def __init__(self, project_path: str | Path | None, default_category: str = DEFAULT_CATEGORY):
        self.project_path = Path(project_path).expanduser() if project_path else None
        self.default_category = default_category

    @property
    def base_dir(self) -> Path:
        if self.project_path is None:
            raise BackendError("Project path not set")
        return self.project_path / CLAUDE_DIR

    @property
    def config_path(self) -> Path:
        return self.base_dir / CONFIG_FILENAME

    def roots(self, kind: UnitKind) -> UnitRoots:
        enabled, disabled = ROOT_NAMES[kind]
        return UnitRoots(
            enabled=str(self.base_dir / enabled),
            disabled=str(self.base_dir / disabled),
        )

    # ── Discovery ────────────────────────────────────────────────────────

    def load_units(self) -> list[Unit]:
        roots = self.roots(UnitKind.SKILL)
        return discover(Path(roots.enabled), Path(roots.disabled), UnitKind.SKILL)

    def load_slash_commands(self) -> list[Unit]:
        roots = self.roots(UnitKind.COMMAND)
        return discover(Path(roots.enabled), Path(roots.disabled), UnitKind.COMMAND)

    # ── Config persistence ───────────────────────────────────────────────

    def load_config(self) -> CategoryConfig:
        """Read the category config, seeding a default one when absent or broken."""
        path = self.config_path
        if path.exists():
            try:
                data: Any = json.loads(path.read_text(encoding="utf-8"))
                config = CategoryConfig.model_validate(data)
                logger.info("backend.config.loaded", path=str(path))
                return config
            except (OSError, json.JSONDecodeError, ValidationError) as e:
                logger.warning("backend.config.unreadable", path=str(path), error=str(e))

        config = CategoryConfig.default(self.default_category)
        try:
            self.save_config(config)
        except BackendError as e:
            logger.warning("backend.config.seed_failed", path=str(path), error=str(e))
        return config

    def save_config(self, config: CategoryConfig) -> None:
        path = self.config_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(config.model_dump(by_alias=True), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            raise BackendError(f"Failed to save config: {e}") from e
        logger.debug("backend.config.saved", path=str(path))

    # ── Relocation ───────────────────────────────────────────────────────

    def _entry_name(self, name: str, kind: UnitKind) -> str:
        return f"{name}{COMMAND_SUFFIX}" if kind is UnitKind.COMMAND else name

    def relocate_unit(self, name: str, enable: bool, kind: UnitKind = UnitKind.SKILL) -> None:
        """Move a unit to the enabled (``enable=True``) or disabled root.

        A unit that is not present in the source root is left alone.
        """
        roots = self.roots(kind)
        enabled_root, disabled_root = Path(roots.enabled), Path(roots.disabled)
        entry = self._entry_name(name, kind)
        src, dst = (
            (disabled_root / entry, enabled_root / entry)
            if enable
            else (enabled_root / entry, disabled_root / entry)
        )

        try:
            enabled_root.mkdir(parents=True, exist_ok=True)
            disabled_root.mkdir(parents=True, exist_ok=True)
            if not src.exists():
                logger.debug("backend.relocate.skipped", unit=name, source=str(src))
                return
            if dst.exists():
                raise RelocationError(name, f"target already exists: {dst}")
            src.rename(dst)
        except OSError as e:
            raise RelocationError(name, str(e)) from e

        logger.debug("backend.relocate.done", unit=name, kind=kind.value, enable=enable)

    def delete_unit(self, name: str, kind: UnitKind = UnitKind.SKILL) -> None:
        roots = self.roots(kind)
        entry = self._entry_name(name, kind)
        removed = False
        try:
            for root in (Path(roots.enabled), Path(roots.disabled)):
                target = root / entry
                if target.is_dir():
                    shutil.rmtree(target)
                    removed = True
                elif target.exists():
                    target.unlink()
                    removed = True
        except OSError as e:
            raise BackendError(f"Failed to delete '{name}': {e}") from e
        if not removed:
            raise BackendError(f"'{name}' not found")
        logger.debug("backend.delete.done", unit=name, kind=kind.value)

    # ── Auxiliary files ──────────────────────────────────────────────────

    def read_file(self, path: str) -> str:
        try:
            return Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise BackendError(f"Failed to read file: {e}") from e

    def write_file(self, path: str, content: str) -> None:
        try:
            Path(path).write_text(content, encoding="utf-8")
        except OSError as e:
            raise BackendError(f"Failed to write file: {e}") from e

    def list_directory(self, path: str) -> list[UnitFile]:
        directory = Path(path)
        if not directory.is_dir():
            raise BackendError("Not a directory")
        try:
            return list_entries(directory)
        except OSError as e:
            raise BackendError(f"Failed to list directory: {e}") from e
