"""
Unit discovery -- scans a project's .claude directory for skills and commands.

Layout (enabled root / disabled sibling):

    .claude/skills/<name>/SKILL.md            .claude/disabled-skills/<name>/SKILL.md
    .claude/commands/<name>.md                .claude/disabled-commands/<name>.md

A unit's enabled state comes from which root it was found under.
"""

import re
from pathlib import Path

import structlog
import yaml

from .models import Unit, UnitFile, UnitKind

logger = structlog.get_logger()

SKILL_FILENAME = "SKILL.md"
COMMAND_SUFFIX = ".md"
MAX_FALLBACK_DESCRIPTION = 100
NO_DESCRIPTION = "No description"

_FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*(?:\n|$)", re.DOTALL)


def parse_description(content: str) -> str:
    """Extract a unit description from its markdown.

    Order of preference: YAML front-matter ``description``, a bare
    ``description:`` line anywhere, the first line that is neither blank,
    a heading nor a ``---`` fence (cut to 100 chars).
    """
    match = _FRONTMATTER_RE.match(content)
    if match:
        try:
            meta = yaml.safe_load(match.group(1)) or {}
        except yaml.YAMLError:
            meta = {}
        if isinstance(meta, dict) and meta.get("description"):
            return " ".join(str(meta["description"]).split())

    for line in content.splitlines():
        trimmed = line.strip()
        if trimmed.startswith("description:"):
            return trimmed.removeprefix("description:").strip().strip('"')

    for line in content.splitlines():
        trimmed = line.strip()
        if trimmed and not trimmed.startswith("#") and not trimmed.startswith("---"):
            return trimmed[:MAX_FALLBACK_DESCRIPTION]

    return NO_DESCRIPTION


def list_entries(directory: Path, skip: tuple[str, ...] = ()) -> list[UnitFile]:
    """Direct children of ``directory``, directories first, then by name."""
    entries = [
        UnitFile(name=child.name, path=str(child), is_directory=child.is_dir())
        for child in directory.iterdir()
        if child.name not in skip
    ]
    entries.sort(key=lambda f: (not f.is_directory, f.name))
    return entries


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("discovery.read_error", path=str(path), error=str(e))
        return ""


def discover_skills(root: Path, enabled: bool) -> list[Unit]:
    """Skills found as ``<root>/<name>/SKILL.md``."""
    if not root.is_dir():
        return []

    skills: list[Unit] = []
    for skill_dir in sorted(root.iterdir()):
        skill_md = skill_dir / SKILL_FILENAME
        if not skill_dir.is_dir() or not skill_md.is_file():
            continue
        content = _read(skill_md)
        skills.append(
            Unit(
                name=skill_dir.name,
                description=parse_description(content),
                content=content,
                path=str(skill_md),
                enabled=enabled,
                kind=UnitKind.SKILL,
                files=tuple(list_entries(skill_dir, skip=(SKILL_FILENAME,))),
            )
        )
    return skills


def discover_commands(root: Path, enabled: bool) -> list[Unit]:
    """Slash commands found as ``<root>/<name>.md``."""
    if not root.is_dir():
        return []

    commands: list[Unit] = []
    for command_md in sorted(root.iterdir()):
        if not command_md.is_file() or command_md.suffix != COMMAND_SUFFIX:
            continue
        content = _read(command_md)
        commands.append(
            Unit(
                name=command_md.stem,
                description=parse_description(content),
                content=content,
                path=str(command_md),
                enabled=enabled,
                kind=UnitKind.COMMAND,
            )
        )
    return commands


def discover(enabled_root: Path, disabled_root: Path, kind: UnitKind) -> list[Unit]:
    """All units of ``kind`` under both roots, sorted by name."""
    scan = discover_skills if kind is UnitKind.SKILL else discover_commands
    units = scan(enabled_root, True) + scan(disabled_root, False)
    units.sort(key=lambda u: u.name)
    logger.info(
        "discovery.complete",
        kind=kind.value,
        count=len(units),
        enabled=sum(1 for u in units if u.enabled),
    )
    return units
