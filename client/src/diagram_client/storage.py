"""Diagram storage coordinator.

``DiagramStorage`` gives callers a document-oriented API over the diagram
store. Reads go through a local cache; every write to a diagram goes through
that diagram's mutation queue, so concurrent read-modify-write cycles on one
diagram apply one after another instead of overwriting each other.

Nested entities (tables, relationships, ...) are edited through the per-kind
``EntityCollection`` attributes, e.g. ``await storage.tables.add(diagram_id,
table)``. Operations addressed by entity id alone find the owning diagram
through the owner index, falling back to the cache and finally to a full
listing from the server.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .api_client import DiagramApiClient
from .cache import DiagramCache, EntityKind, contains_entity, items_of
from .errors import DiagramNotFoundError
from .models import Diagram, serialize_attributes
from .mutation_queue import KeyedMutationQueue

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {"defaultDiagramId": ""}

Mutator = Callable[[Diagram], None]


def _sort_key(item: Dict[str, Any]) -> Tuple[str, str]:
    """Case-insensitive name order; exact name breaks ties."""
    name = item.get("name")
    if not isinstance(name, str):
        name = ""
    return name.casefold(), name


class EntityCollection:
    """Operations on one nested collection kind across all diagrams."""

    def __init__(self, storage: "DiagramStorage", kind: EntityKind, sort_by_name: bool = False):
        self._storage = storage
        self.kind = kind
        self.sort_by_name = sort_by_name

    def _items(self, diagram: Diagram) -> List[Dict[str, Any]]:
        return items_of(diagram, self.kind)

    def _set_items(self, diagram: Diagram, items: List[Dict[str, Any]]) -> None:
        setattr(diagram, self.kind.value, items)

    async def add(self, diagram_id: str, item: Dict[str, Any]) -> Diagram:
        """Append *item* to the collection."""
        def append(diagram: Diagram) -> None:
            self._set_items(diagram, [*self._items(diagram), item])

        return await self._storage.mutate(diagram_id, append)

    async def get(self, diagram_id: str, entity_id: str) -> Optional[Dict[str, Any]]:
        diagram = await self._storage.fetch(diagram_id)
        for item in self._items(diagram):
            if item.get("id") == entity_id:
                return item
        return None

    async def update(self, entity_id: str, attributes: Dict[str, Any]) -> Diagram:
        """Shallow-merge *attributes* into the entity, wherever it lives.

        Raises DiagramNotFoundError if no diagram contains the entity.
        """
        diagram_id = await self._storage.resolve_owner(self.kind, entity_id)

        def merge(diagram: Diagram) -> None:
            self._set_items(diagram, [
                {**item, **attributes} if item.get("id") == entity_id else item
                for item in self._items(diagram)
            ])

        return await self._storage.mutate(diagram_id, merge)

    async def put(self, diagram_id: str, item: Dict[str, Any]) -> Diagram:
        """Replace the entity with the same id, or append it."""
        item_id = item.get("id")

        def replace_or_append(diagram: Diagram) -> None:
            items = self._items(diagram)
            if any(existing.get("id") == item_id for existing in items):
                items = [item if existing.get("id") == item_id else existing for existing in items]
            else:
                items = [*items, item]
            self._set_items(diagram, items)

        return await self._storage.mutate(diagram_id, replace_or_append)

    async def delete(self, diagram_id: str, entity_id: str) -> Diagram:
        def remove(diagram: Diagram) -> None:
            self._set_items(diagram, [item for item in self._items(diagram) if item.get("id") != entity_id])

        return await self._storage.mutate(diagram_id, remove)

    async def clear(self, diagram_id: str) -> Diagram:
        """Remove every entity of this kind from the diagram."""
        return await self._storage.mutate(diagram_id, lambda diagram: self._set_items(diagram, []))

    async def list(self, diagram_id: str) -> List[Dict[str, Any]]:
        """Entities in stored order, or sorted by name for named kinds."""
        items = self._items(await self._storage.fetch(diagram_id))
        if self.sort_by_name:
            return sorted(items, key=_sort_key)
        return items


class DiagramStorage:
    """Cache-backed, per-diagram serialized access to the diagram store."""

    def __init__(
        self,
        client: DiagramApiClient,
        cache: Optional[DiagramCache] = None,
        queue: Optional[KeyedMutationQueue] = None,
    ):
        self.client = client
        self.cache = cache or DiagramCache()
        self.queue = queue or KeyedMutationQueue()

        self.tables = EntityCollection(self, EntityKind.TABLES)
        self.relationships = EntityCollection(self, EntityKind.RELATIONSHIPS, sort_by_name=True)
        self.dependencies = EntityCollection(self, EntityKind.DEPENDENCIES)
        self.areas = EntityCollection(self, EntityKind.AREAS)
        self.custom_types = EntityCollection(self, EntityKind.CUSTOM_TYPES, sort_by_name=True)
        self.notes = EntityCollection(self, EntityKind.NOTES)

    def collection(self, kind: EntityKind) -> EntityCollection:
        return getattr(self, kind.name.lower())

    # ----- core ------------------------------------------------------------

    def _cache_payload(self, raw: Dict[str, Any]) -> Diagram:
        """Parse a server payload, cache it, and return a private copy."""
        diagram = Diagram.model_validate(raw)
        self.cache.put(diagram)
        return diagram.model_copy(deep=True)

    def _cache_read(self, diagram: Diagram, seen_generation: int, skip_pending: bool = False) -> bool:
        """Cache a diagram read outside its queue unless a newer write landed.

        *seen_generation* is the cache generation of the id when the request
        was sent. With *skip_pending* the diagram is also left alone while
        its queue has work in flight.
        """
        if self.cache.generation(diagram.id) != seen_generation or (
            skip_pending and self.queue.has_pending(diagram.id)
        ):
            logger.debug("Discarding stale read of diagram %s", diagram.id)
            return False
        self.cache.put(diagram)
        return True

    async def _list_full(self) -> List[Diagram]:
        """Full listing; each diagram is cached only if still current."""
        seen = self.cache.generations()
        listed = [Diagram.model_validate(raw) for raw in await self.client.list_diagrams(full=True)]
        for diagram in listed:
            self._cache_read(diagram, seen.get(diagram.id, 0), skip_pending=True)
        return [diagram.model_copy(deep=True) for diagram in listed]

    def _evict(self, diagram_id: str) -> None:
        self.cache.remove(diagram_id)
        self.queue.clear(diagram_id)

    async def fetch(self, diagram_id: str) -> Diagram:
        """Full diagram, from cache when possible. Always a private copy."""
        cached = self.cache.get(diagram_id)
        if cached is not None:
            return cached
        seen = self.cache.generation(diagram_id)
        diagram = Diagram.model_validate(await self.client.get_diagram(diagram_id))
        self._cache_read(diagram, seen)
        return diagram.model_copy(deep=True)

    async def run_exclusive(self, diagram_id: str, operation: Callable[[], Awaitable[Any]]) -> Any:
        """Run *operation* in the diagram's queue, after earlier submissions."""
        return await self.queue.run(diagram_id, operation)

    async def mutate(self, diagram_id: str, mutator: Mutator) -> Diagram:
        """Fetch, edit in place with *mutator*, and save the diagram.

        Runs in the diagram's queue, so each mutation sees the result of
        the one submitted before it.
        """
        async def operation() -> Diagram:
            diagram = await self.fetch(diagram_id)
            mutator(diagram)
            saved = await self.client.replace_diagram(diagram_id, diagram.to_payload())
            return self._cache_payload(saved)

        return await self.run_exclusive(diagram_id, operation)

    async def resolve_owner(self, kind: EntityKind, entity_id: str) -> str:
        """Id of the diagram containing the entity.

        Checks the owner index, then cached diagrams, then every diagram on
        the server. Raises DiagramNotFoundError when none contains it.
        """
        owner = self.cache.owners.lookup(kind, entity_id)
        if owner:
            return owner
        owner = self.cache.find_owner(kind, entity_id)
        if owner:
            return owner

        logger.debug("Owner of %s %s not cached; listing all diagrams", kind.value, entity_id)
        for diagram in await self._list_full():
            if contains_entity(diagram, kind, entity_id):
                self.cache.owners.assign(kind, entity_id, diagram.id)
                return diagram.id

        raise DiagramNotFoundError(f"Entity {entity_id} was not found", status_code=404)

    # ----- config ----------------------------------------------------------

    async def get_config(self) -> Dict[str, Any]:
        return {**DEFAULT_CONFIG, **await self.client.get_config()}

    async def update_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.update_config(config)

    # ----- filters ---------------------------------------------------------

    async def get_diagram_filter(self, diagram_id: str) -> Optional[Dict[str, Any]]:
        return await self.client.get_filter(diagram_id)

    async def update_diagram_filter(self, diagram_id: str, diagram_filter: Dict[str, Any]) -> Dict[str, Any]:
        return await self.client.put_filter(diagram_id, diagram_filter)

    async def delete_diagram_filter(self, diagram_id: str) -> None:
        await self.client.delete_filter(diagram_id)

    # ----- diagrams --------------------------------------------------------

    async def add_diagram(self, diagram: Diagram) -> Diagram:
        """Create *diagram* on the server and cache the stored result."""
        return self._cache_payload(await self.client.create_diagram(diagram.to_payload()))

    async def list_diagrams(self, include_entities: bool = False) -> List[Diagram]:
        """All diagrams, most recently updated first.

        Without *include_entities* only summaries are fetched; they refresh
        the summary fields of diagrams already cached but are not cached on
        their own, since they lack the nested collections.
        """
        if include_entities:
            return await self._list_full()

        seen = self.cache.generations()
        metas = [Diagram.model_validate(raw) for raw in await self.client.list_diagrams()]
        for meta in metas:
            cached = self.cache.get(meta.id)
            if cached is not None:
                self._cache_read(cached.model_copy(update={
                    "name": meta.name,
                    "database_type": meta.database_type,
                    "database_edition": meta.database_edition,
                    "created_at": meta.created_at,
                    "updated_at": meta.updated_at,
                }), seen.get(meta.id, 0), skip_pending=True)
        return metas

    async def get_diagram(self, diagram_id: str, include_entities: bool = False) -> Diagram:
        diagram = await self.fetch(diagram_id)
        return diagram if include_entities else diagram.to_meta()

    async def update_diagram(self, diagram_id: str, attributes: Dict[str, Any]) -> Diagram:
        """Patch top-level attributes. Changing ``id`` renames the diagram."""
        async def operation() -> Diagram:
            raw = await self.client.patch_diagram(diagram_id, serialize_attributes(attributes))
            if raw.get("id") != diagram_id:
                logger.debug("Diagram %s renamed to %s", diagram_id, raw.get("id"))
                self._evict(diagram_id)
            return self._cache_payload(raw)

        return await self.run_exclusive(diagram_id, operation)

    async def delete_diagram(self, diagram_id: str) -> None:
        """Delete the diagram and forget its cache, index and queue state."""
        async def operation() -> None:
            await self.client.delete_diagram(diagram_id)
            self._evict(diagram_id)

        await self.run_exclusive(diagram_id, operation)

    # ----- versions --------------------------------------------------------

    async def list_versions(self, diagram_id: str) -> List[Dict[str, Any]]:
        return await self.client.list_versions(diagram_id)

    async def restore_version(self, diagram_id: str, version_id: int) -> Diagram:
        """Restore a stored version and cache the restored content."""
        async def operation() -> Diagram:
            return self._cache_payload(await self.client.restore_version(diagram_id, version_id))


        return await self.run_exclusive(diagram_id, operation)
