"""Diagram cache and the owner index over its nested entities."""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from .models import Diagram

logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    """Nested collections of a diagram; values are Diagram attribute names."""

    TABLES = "tables"
    RELATIONSHIPS = "relationships"
    DEPENDENCIES = "dependencies"
    AREAS = "areas"
    CUSTOM_TYPES = "custom_types"
    NOTES = "notes"


def items_of(diagram: Diagram, kind: EntityKind) -> List[Dict[str, Any]]:
    """Items of one collection, empty when the diagram does not carry it."""
    return getattr(diagram, kind.value) or []


def contains_entity(diagram: Diagram, kind: EntityKind, entity_id: str) -> bool:
    return any(item.get("id") == entity_id for item in items_of(diagram, kind))


class OwnerIndex:
    """Reverse lookup from nested entity id to owning diagram id, per kind.

    Advisory only: every entry can be rebuilt from the diagrams themselves.
    """

    def __init__(self) -> None:
        self._owners: Dict[EntityKind, Dict[str, str]] = {kind: {} for kind in EntityKind}

    def index(self, diagram: Diagram) -> None:
        for kind in EntityKind:
            owners = self._owners[kind]
            for item in items_of(diagram, kind):
                item_id = item.get("id")
                if item_id is not None:
                    owners[item_id] = diagram.id

    def unindex(self, diagram: Diagram) -> None:
        """Drop the entries *diagram* contributed."""
        for kind in EntityKind:
            owners = self._owners[kind]
            for item in items_of(diagram, kind):
                item_id = item.get("id")
                if owners.get(item_id) == diagram.id:
                    del owners[item_id]

    def lookup(self, kind: EntityKind, entity_id: str) -> Optional[str]:
        return self._owners[kind].get(entity_id)

    def assign(self, kind: EntityKind, entity_id: str, diagram_id: str) -> None:
        self._owners[kind][entity_id] = diagram_id


class DiagramCache:
    """Last-known copies of diagrams keyed by id.

    The cache owns its entries: ``get`` hands out deep copies, and
    ``put`` re-indexes owners so the index always matches the cached
    content.

    Every ``put`` and ``remove`` bumps the id's generation. A read that
    started before a write landed can compare generations and drop its
    now-stale result instead of caching it.
    """

    def __init__(self, owners: Optional[OwnerIndex] = None) -> None:
        self._diagrams: Dict[str, Diagram] = {}
        self._generations: Dict[str, int] = {}
        self.owners = owners or OwnerIndex()

    def __contains__(self, diagram_id: object) -> bool:
        return diagram_id in self._diagrams

    def __len__(self) -> int:
        return len(self._diagrams)

    def _bump(self, diagram_id: str) -> None:
        self._generations[diagram_id] = self.generation(diagram_id) + 1

    def generation(self, diagram_id: str) -> int:
        """Number of writes to *diagram_id* so far (0 if never cached)."""
        return self._generations.get(diagram_id, 0)

    def generations(self) -> Dict[str, int]:
        return dict(self._generations)

    def get(self, diagram_id: str) -> Optional[Diagram]:
        cached = self._diagrams.get(diagram_id)
        if cached is None:
            return None
        return cached.model_copy(deep=True)

    def put(self, diagram: Diagram) -> None:
        """Store *diagram* (taking ownership of it) and index its entities."""
        previous = self._diagrams.get(diagram.id)
        if previous is not None:
            self.owners.unindex(previous)
        self._diagrams[diagram.id] = diagram
        self.owners.index(diagram)
        self._bump(diagram.id)
        logger.debug("Cached diagram %s", diagram.id)

    def remove(self, diagram_id: str) -> None:
        self._bump(diagram_id)
        previous = self._diagrams.pop(diagram_id, None)
        if previous is not None:
            self.owners.unindex(previous)
            logger.debug("Evicted diagram %s", diagram_id)

    def find_owner(self, kind: EntityKind, entity_id: str) -> Optional[str]:
        """Scan cached diagrams for *entity_id*, backfilling the index on a hit."""
        for diagram in self._diagrams.values():
            if contains_entity(diagram, kind, entity_id):
                self.owners.assign(kind, entity_id, diagram.id)
                return diagram.id
        return None
