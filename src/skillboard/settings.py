"""
Per-user settings -- remembers which project the board manages.

Stored as JSON in ``~/.skillboard/settings.json``. A missing or unreadable
file yields default settings.
"""

import json
from pathlib import Path

import structlog
from pydantic import ValidationError

from .config.schema import ProjectSettings

logger = structlog.get_logger()

SETTINGS_DIR = ".skillboard"
SETTINGS_FILENAME = "settings.json"


def settings_path() -> Path:
    return Path.home() / SETTINGS_DIR / SETTINGS_FILENAME


def load_settings() -> ProjectSettings:
    path = settings_path()
    if not path.exists():
        return ProjectSettings()
    try:
        return ProjectSettings.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.warning("settings.load_error", path=str(path), error=str(e))
        return ProjectSettings()


def save_settings(settings: ProjectSettings) -> None:
    """Write settings to disk, creating the directory if needed.

    Raises:
        OSError: If the file cannot be written.
    """
    path = settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(settings.model_dump(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    logger.debug("settings.saved", path=str(path))


def set_project_path(project_path: str | Path) -> ProjectSettings:
    settings = load_settings()
    settings.project_path = str(Path(project_path).expanduser().resolve())
    save_settings(settings)
    return settings
