"""Async client library for the diagram store."""

from .api_client import DiagramApiClient
from .cache import DiagramCache, EntityKind, OwnerIndex
from .errors import (
    DiagramClientError,
    DiagramConflictError,
    DiagramNotFoundError,
    DiagramValidationError,
)
from .models import Diagram
from .mutation_queue import KeyedMutationQueue
from .storage import DiagramStorage, EntityCollection

__all__ = [
    "Diagram",
    "DiagramApiClient",
    "DiagramCache",
    "DiagramClientError",
    "DiagramConflictError",
    "DiagramNotFoundError",
    "DiagramStorage",
    "DiagramValidationError",
    "EntityCollection",
    "EntityKind",
    "KeyedMutationQueue",
    "OwnerIndex",
]
