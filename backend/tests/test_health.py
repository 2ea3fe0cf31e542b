"""Tests for /api/health, routing errors and middleware headers."""

from sqlalchemy.exc import OperationalError

from diagram_store.database import get_db


class TestHealth:

    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["db"] == "ok"
        assert "uptime_seconds" in data

    def test_unreachable_database_still_reports_ok(self, app, client):
        class UnreachableSession:
            def execute(self, *args, **kwargs):
                raise OperationalError("SELECT 1", {}, Exception("database is down"))

        app.dependency_overrides[get_db] = lambda: UnreachableSession()
        try:
            resp = client.get("/api/health")
        finally:
            app.dependency_overrides.clear()

        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["db"] == "error"


class TestRoutingErrors:

    def test_unknown_route_is_structured_404(self, client):
        resp = client.get("/api/nothing-here")
        assert resp.status_code == 404
        assert resp.json()["error"] == "NOT_FOUND"

    def test_unsupported_method_is_405(self, client):
        resp = client.post("/api/diagrams/d1/versions")
        assert resp.status_code == 405
        assert resp.json()["error"] == "METHOD_NOT_ALLOWED"

    def test_unsupported_method_on_config(self, client):
        resp = client.delete("/api/config")
        assert resp.status_code == 405


class TestResponseHeaders:

    def test_response_includes_middleware_headers(self, client):
        resp = client.get("/api/health")
        assert "x-request-id" in resp.headers
        assert "x-response-time" in resp.headers

    def test_request_id_is_propagated(self, client):
        resp = client.get("/api/health", headers={"X-Request-ID": "abc123"})
        assert resp.headers["x-request-id"] == "abc123"

    def test_cors_preflight(self, client):
        resp = client.options(
            "/api/diagrams",
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "PATCH",
            },
        )
        assert resp.status_code == 200
        assert "PATCH" in resp.headers["access-control-allow-methods"]
