"""API routes."""

from .config import router as config_router
from .diagrams import router as diagrams_router
from .filters import router as filters_router
from .versions import router as versions_router

__all__ = [
    "config_router",
    "diagrams_router",
    "filters_router",
    "versions_router",
]
