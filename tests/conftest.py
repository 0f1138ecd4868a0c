"""Shared fixtures: settings, in-memory database and sessions."""

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from soundrate.config import CatalogSettings, DatabaseSettings, Settings
from soundrate.infrastructure.persistence import Database


@pytest.fixture
def catalog_settings() -> CatalogSettings:
    """Catalog settings with fake credentials."""
    return CatalogSettings(
        client_id="test-client-id",
        client_secret="test-client-secret",
        max_retries=2,
    )


@pytest.fixture
def settings(catalog_settings: CatalogSettings) -> Settings:
    """Settings pointing at a private in-memory SQLite database."""
    return Settings(
        catalog=catalog_settings,
        database=DatabaseSettings(url="sqlite+aiosqlite:///:memory:"),
    )


@pytest.fixture
async def db(settings: Settings) -> AsyncGenerator[Database, None]:
    """Database with all tables created."""
    database = Database(settings)
    await database.create_tables()
    yield database
    await database.close()


@pytest.fixture
async def session(db: Database) -> AsyncGenerator[AsyncSession, None]:
    """Transactional session (committed at teardown)."""
    async with db.session_scope() as session:
        yield session
