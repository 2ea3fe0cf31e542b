"""Database models."""

from .diagram import Diagram
from .version import DiagramVersion, VERSION_ACTIONS
from .filter import DiagramFilter
from .setting import Setting, CONFIG_KEY

__all__ = [
    "Diagram", "DiagramVersion", "VERSION_ACTIONS",
    "DiagramFilter", "Setting", "CONFIG_KEY",
]
