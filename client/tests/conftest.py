"""Fixtures for the client test suite.

The client talks to a real diagram store app in-process through
httpx.ASGITransport, backed by a throwaway SQLite file per test.
"""

import httpx
import pytest
import pytest_asyncio

from diagram_client import DiagramApiClient, DiagramStorage
from diagram_store.core.config import Settings
from diagram_store.main import create_app


@pytest.fixture()
def store_app(tmp_path):
    settings = Settings(
        data_dir=str(tmp_path),
        database_url="",
        log_format="text",
        log_level="WARNING",
    )
    return create_app(settings)


@pytest_asyncio.fixture()
async def api(store_app):
    client = DiagramApiClient(
        base_url="http://testserver",
        transport=httpx.ASGITransport(app=store_app),
    )
    yield client
    await client.close()


@pytest.fixture()
def storage(api) -> DiagramStorage:
    return DiagramStorage(api)
