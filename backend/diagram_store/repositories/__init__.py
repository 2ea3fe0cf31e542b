"""Data access repositories."""

from .base import BaseRepository
from .diagram_repository import DiagramRepository
from .version_repository import VersionRepository
from .filter_repository import FilterRepository
from .settings_repository import SettingsRepository

__all__ = [
    "BaseRepository",
    "DiagramRepository",
    "VersionRepository",
    "FilterRepository",
    "SettingsRepository",
]
