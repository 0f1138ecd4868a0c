"""API fixtures: the real app (lifespan, SQLite) with a mocked catalog client."""

from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from soundrate.api.dependencies import get_catalog_client
from soundrate.config import Settings
from soundrate.domain.ports import ICatalogClient
from soundrate.main import create_app


@pytest.fixture
def catalog_client() -> AsyncMock:
    return AsyncMock(spec=ICatalogClient)


@pytest.fixture
def app(settings: Settings, catalog_client: AsyncMock) -> FastAPI:
    app = create_app(settings)
    app.dependency_overrides[get_catalog_client] = lambda: catalog_client
    return app


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Test client with the lifespan running (tables created)."""
    with TestClient(app) as client:
        yield client
