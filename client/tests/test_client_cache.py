"""Tests for DiagramCache and OwnerIndex."""

from diagram_client import Diagram, DiagramCache, EntityKind, OwnerIndex


def make(diagram_id="d1", **collections) -> Diagram:
    return Diagram.model_validate({"id": diagram_id, "name": diagram_id, **collections})


class TestDiagramCache:

    def test_get_missing(self):
        assert DiagramCache().get("nope") is None

    def test_get_returns_independent_copy(self):
        cache = DiagramCache()
        cache.put(make(tables=[{"id": "t1", "name": "users"}]))

        copy = cache.get("d1")
        copy.tables[0]["name"] = "changed"
        copy.tables.append({"id": "t2"})

        assert cache.get("d1").tables == [{"id": "t1", "name": "users"}]

    def test_put_indexes_entities(self):
        cache = DiagramCache()
        cache.put(make(tables=[{"id": "t1"}], notes=[{"id": "n1"}], customTypes=[{"id": "c1"}]))
        assert cache.owners.lookup(EntityKind.TABLES, "t1") == "d1"
        assert cache.owners.lookup(EntityKind.NOTES, "n1") == "d1"
        assert cache.owners.lookup(EntityKind.CUSTOM_TYPES, "c1") == "d1"
        assert cache.owners.lookup(EntityKind.AREAS, "t1") is None

    def test_put_replaces_stale_index_entries(self):
        cache = DiagramCache()
        cache.put(make(tables=[{"id": "t1"}]))
        cache.put(make(tables=[{"id": "t2"}]))
        assert cache.owners.lookup(EntityKind.TABLES, "t1") is None
        assert cache.owners.lookup(EntityKind.TABLES, "t2") == "d1"
        assert len(cache) == 1

    def test_remove_clears_index(self):
        cache = DiagramCache()
        cache.put(make(relationships=[{"id": "r1"}]))
        cache.remove("d1")
        assert "d1" not in cache
        assert cache.owners.lookup(EntityKind.RELATIONSHIPS, "r1") is None
        cache.remove("d1")

    def test_generation_counts_writes(self):
        cache = DiagramCache()
        assert cache.generation("d1") == 0
        cache.put(make())
        cache.put(make())
        assert cache.generation("d1") == 2

        snapshot = cache.generations()
        cache.remove("d1")
        assert cache.generation("d1") == 3
        assert snapshot == {"d1": 2}

    def test_find_owner_backfills_index(self):
        owners = OwnerIndex()
        cache = DiagramCache(owners)
        cache.put(make("a", areas=[{"id": "x"}]))
        owners.unindex(make("a", areas=[{"id": "x"}]))
        assert owners.lookup(EntityKind.AREAS, "x") is None

        assert cache.find_owner(EntityKind.AREAS, "x") == "a"
        assert owners.lookup(EntityKind.AREAS, "x") == "a"
        assert cache.find_owner(EntityKind.AREAS, "missing") is None


class TestOwnerIndex:

    def test_unindex_keeps_entries_owned_elsewhere(self):
        index = OwnerIndex()
        index.index(make("a", tables=[{"id": "t1"}]))
        index.index(make("b", tables=[{"id": "t1"}]))
        index.unindex(make("a", tables=[{"id": "t1"}]))
        assert index.lookup(EntityKind.TABLES, "t1") == "b"

    def test_items_without_id_are_skipped(self):
        index = OwnerIndex()
        index.index(make(tables=[{"name": "no id"}]))
        assert index.lookup(EntityKind.TABLES, None) is None
