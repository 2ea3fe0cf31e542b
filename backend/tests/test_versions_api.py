"""Tests for version history: listing, retrieval, retention and restore."""

import pytest
from fastapi.testclient import TestClient

from diagram_store.main import create_app
from store_helpers import count_versions, make_diagram, make_settings


@pytest.fixture()
def capped_client(tmp_path):
    """Client whose store keeps at most three versions per diagram."""
    app = create_app(make_settings(tmp_path, max_versions_per_diagram=3))
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def unlimited_client(tmp_path):
    app = create_app(make_settings(tmp_path, max_versions_per_diagram=0))
    with TestClient(app) as c:
        yield c


class TestVersionListing:

    def test_create_records_one_version(self, client):
        client.post("/api/diagrams", json=make_diagram())
        versions = client.get("/api/diagrams/d1/versions").json()
        assert len(versions) == 1
        v = versions[0]
        assert v["action"] == "create"
        assert v["diagramId"] == "d1"
        assert v["name"] == "N"
        assert isinstance(v["id"], int)
        assert v["createdAt"]

    def test_versions_are_newest_first(self, client):
        client.post("/api/diagrams", json=make_diagram())
        client.put("/api/diagrams/d1", json=make_diagram(name="saved"))
        client.patch("/api/diagrams/d1", json={"name": "patched"})
        versions = client.get("/api/diagrams/d1/versions").json()
        assert [v["action"] for v in versions] == ["patch", "save", "create"]
        assert [v["name"] for v in versions] == ["patched", "saved", "N"]
        ids = [v["id"] for v in versions]
        assert ids == sorted(ids, reverse=True)

    def test_unknown_diagram_has_no_versions(self, client):
        resp = client.get("/api/diagrams/nope/versions")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_get_version_payload(self, client):
        client.post("/api/diagrams", json=make_diagram(tables=[{"id": "t1"}]))
        version_id = client.get("/api/diagrams/d1/versions").json()[0]["id"]
        resp = client.get(f"/api/diagrams/d1/versions/{version_id}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["tables"] == [{"id": "t1"}]
        assert data["id"] == "d1"

    def test_version_of_other_diagram_is_404(self, client):
        client.post("/api/diagrams", json=make_diagram("a"))
        client.post("/api/diagrams", json=make_diagram("b"))
        version_id = client.get("/api/diagrams/a/versions").json()[0]["id"]
        resp = client.get(f"/api/diagrams/b/versions/{version_id}")
        assert resp.status_code == 404
        assert resp.json()["error"] == "VERSION_NOT_FOUND"

    def test_non_integer_version_id_is_400(self, client):
        client.post("/api/diagrams", json=make_diagram())
        assert client.get("/api/diagrams/d1/versions/abc").status_code == 400
        assert client.post("/api/diagrams/d1/versions/abc/restore").status_code == 400


class TestRetention:

    def test_history_is_capped(self, capped_client):
        capped_client.post("/api/diagrams", json=make_diagram())
        for i in range(4):
            capped_client.patch("/api/diagrams/d1", json={"name": f"N{i}"})

        versions = capped_client.get("/api/diagrams/d1/versions").json()
        assert len(versions) == 3
        assert [v["name"] for v in versions] == ["N3", "N2", "N1"]
        assert all(v["action"] == "patch" for v in versions)

    def test_saves_are_capped(self, capped_client):
        capped_client.post("/api/diagrams", json=make_diagram())
        for i in range(5):
            resp = capped_client.put("/api/diagrams/d1", json=make_diagram(name=f"S{i}"))
            assert resp.status_code == 200

        versions = capped_client.get("/api/diagrams/d1/versions").json()
        assert [(v["action"], v["name"]) for v in versions] == [("save", "S4"), ("save", "S3"), ("save", "S2")]

    def test_restores_are_capped(self, capped_client):
        capped_client.post("/api/diagrams", json=make_diagram())
        capped_client.put("/api/diagrams/d1", json=make_diagram(name="S1"))
        capped_client.put("/api/diagrams/d1", json=make_diagram(name="S2"))

        for _ in range(3):
            oldest = capped_client.get("/api/diagrams/d1/versions").json()[-1]
            resp = capped_client.post(f"/api/diagrams/d1/versions/{oldest['id']}/restore")
            assert resp.status_code == 200
            assert resp.json()["name"] == oldest["name"]

        versions = capped_client.get("/api/diagrams/d1/versions").json()
        assert len(versions) == 3
        assert all(v["action"] == "restore" for v in versions)
        ids = [v["id"] for v in versions]
        assert ids == sorted(ids, reverse=True)

    def test_rename_past_cap_keeps_newest_history(self, capped_client):
        capped_client.post("/api/diagrams", json=make_diagram())
        for i in range(3):
            capped_client.patch("/api/diagrams/d1", json={"name": f"N{i}"})
        assert count_versions(capped_client, "d1") == 3

        resp = capped_client.patch("/api/diagrams/d1", json={"id": "d2", "name": "moved"})
        assert resp.status_code == 200

        versions = capped_client.get("/api/diagrams/d2/versions").json()
        assert [v["name"] for v in versions] == ["moved", "N2", "N1"]
        assert all(v["diagramId"] == "d2" for v in versions)
        assert count_versions(capped_client, "d1") == 0

    def test_cap_is_per_diagram(self, capped_client):
        for diagram_id in ("a", "b"):
            capped_client.post("/api/diagrams", json=make_diagram(diagram_id))
            for i in range(3):
                capped_client.patch(f"/api/diagrams/{diagram_id}", json={"name": f"x{i}"})
        assert count_versions(capped_client, "a") == 3
        assert count_versions(capped_client, "b") == 3

    def test_zero_means_unlimited(self, unlimited_client):
        unlimited_client.post("/api/diagrams", json=make_diagram())
        for i in range(120):
            unlimited_client.patch("/api/diagrams/d1", json={"name": f"N{i}"})
        assert count_versions(unlimited_client, "d1") == 121


class TestRestore:

    def test_restore_replaces_content_and_records_version(self, client):
        client.post("/api/diagrams", json=make_diagram(tables=[{"id": "t1"}]))
        client.patch("/api/diagrams/d1", json={"name": "N2", "tables": []})
        original = client.get("/api/diagrams/d1/versions").json()[-1]

        resp = client.post(f"/api/diagrams/d1/versions/{original['id']}/restore")
        assert resp.status_code == 200
        restored = resp.json()
        assert restored["id"] == "d1"
        assert restored["name"] == "N"
        assert restored["tables"] == [{"id": "t1"}]

        current = client.get("/api/diagrams/d1").json()
        assert current == restored

        versions = client.get("/api/diagrams/d1/versions").json()
        assert len(versions) == 3
        assert versions[0]["action"] == "restore"

        snapshot = client.get(f"/api/diagrams/d1/versions/{original['id']}").json()
        for doc in (snapshot, restored):
            doc.pop("updatedAt")
        assert restored == snapshot

    def test_restore_refreshes_updated_at(self, client):
        client.post("/api/diagrams", json=make_diagram(updatedAt="2020-01-01T00:00:00Z"))
        version_id = client.get("/api/diagrams/d1/versions").json()[0]["id"]
        restored = client.post(f"/api/diagrams/d1/versions/{version_id}/restore").json()
        assert restored["updatedAt"] != "2020-01-01T00:00:00Z"

    def test_restore_after_rename_uses_new_id(self, client):
        client.post("/api/diagrams", json=make_diagram())
        client.patch("/api/diagrams/d1", json={"id": "d2", "name": "moved"})
        oldest = client.get("/api/diagrams/d2/versions").json()[-1]

        restored = client.post(f"/api/diagrams/d2/versions/{oldest['id']}/restore").json()
        assert restored["id"] == "d2"
        assert restored["name"] == "N"
        assert client.get("/api/diagrams/d1").status_code == 404

    def test_restore_unknown_version_is_404(self, client):
        client.post("/api/diagrams", json=make_diagram())
        resp = client.post("/api/diagrams/d1/versions/99999/restore")
        assert resp.status_code == 404
        assert resp.json()["error"] == "VERSION_NOT_FOUND"
