"""Shared test fixtures for the diagram store test suite.

Every test gets its own SQLite file under pytest's tmp_path, so tests are
fully isolated and need no external database.
"""

import pytest
from fastapi.testclient import TestClient

from diagram_store.core.config import Settings
from diagram_store.main import create_app
from store_helpers import make_settings


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    """FastAPI TestClient running the app lifespan."""
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db(app):
    """Session on the test app's database, for service-level tests."""
    session = app.state.session_factory()
    yield session
    session.close()
