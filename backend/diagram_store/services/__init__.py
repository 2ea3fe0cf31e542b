"""Business logic services."""

from .diagram_service import DiagramService
from .config_service import ConfigService

__all__ = ["DiagramService", "ConfigService"]
