"""
Configuration module for skillboard.

Exports the main components for convenient imports.
"""

from .loader import load_config
from .schema import (
    DEFAULT_CATEGORY,
    AppConfig,
    CategoryConfig,
    EngineConfig,
    LoggingConfig,
    ProjectSettings,
    WorkspaceConfig,
)

__all__ = [
    "load_config",
    "AppConfig",
    "CategoryConfig",
    "DEFAULT_CATEGORY",
    "EngineConfig",
    "LoggingConfig",
    "ProjectSettings",
    "WorkspaceConfig",
]
