"""
Pydantic models for skillboard configuration.

Two separate documents are modelled here:

- ``AppConfig``: how the tool itself runs (workspace, logging, engine
  tuning). Loaded from YAML + env vars + CLI args.
- ``CategoryConfig``: the per-project category layout persisted as JSON
  next to the skills (``.claude/skill-manager-config.json``). It is written
  by older versions and edited by hand, so it is tolerant: unknown keys are
  ignored and every field has a default.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationInfo, field_validator

DEFAULT_CATEGORY = "Uncategorized"


class CategoryConfig(BaseModel):
    """Persisted category layout (JSON, camelCase on disk)."""

    categories: dict[str, list[str]] = Field(default_factory=dict)
    category_order: list[str] = Field(default_factory=list, alias="categoryOrder")
    load_slash_commands: bool = Field(default=True, alias="loadSlashCommands")
    command_categories: dict[str, list[str]] = Field(
        default_factory=dict, alias="commandCategories"
    )
    command_category_order: list[str] = Field(
        default_factory=list, alias="commandCategoryOrder"
    )

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator(
        "categories", "command_categories", "category_order", "command_category_order",
        mode="before",
    )
    @classmethod
    def none_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return [] if info.field_name.endswith("order") else {}
        return value

    @classmethod
    def default(cls, category: str = DEFAULT_CATEGORY) -> "CategoryConfig":
        """Seed config used when a project has none yet."""
        return cls(categories={category: []}, command_categories={category: []})


class ProjectSettings(BaseModel):
    """Per-user settings remembered between runs."""

    project_path: str | None = None

    model_config = {"extra": "ignore"}


class LoggingConfig(BaseModel):
    """Logging system configuration."""

    level: Literal["debug", "info", "human", "warn", "error"] = "human"
    file: Path | None = None
    verbose: int = 0

    model_config = {"extra": "forbid"}


class WorkspaceConfig(BaseModel):
    """Which project to manage. None falls back to the remembered settings."""

    project: Path | None = None

    model_config = {"extra": "forbid"}


class EngineConfig(BaseModel):
    """Tuning for the curation engine."""

    max_relocation_workers: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Upper bound on concurrent moves during enable-all / disable-all.",
    )
    default_category: str = Field(
        default=DEFAULT_CATEGORY,
        min_length=1,
        description="Category seeded into a project that has no config yet.",
    )
    reload_interval: float = Field(
        default=0,
        ge=0,
        description="Seconds between automatic reloads in watch mode. 0 disables it.",
    )

    model_config = {"extra": "forbid"}


class AppConfig(BaseModel):
    """Complete application configuration.

    Root of the configuration tree and the entry point for validation.
    """

    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)

    model_config = {"extra": "forbid"}
