"""Application lifecycle management for startup and shutdown tasks."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from soundrate.config import Settings, get_settings
from soundrate.infrastructure.integrations import ClientCredentialsTokenCache, SpotifyClient
from soundrate.infrastructure.observability import configure_logging
from soundrate.infrastructure.persistence import Database
from soundrate.infrastructure.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


# Listen future me, everything before `yield` runs at STARTUP and everything after it at
# SHUTDOWN. The process-wide singletons (database, token cache, catalog client) are built
# here exactly once and parked on app.state; api/dependencies.py reads them from there.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles:
    - Logging configuration
    - Database initialization (and table creation when enabled)
    - Catalog token cache and Spotify client construction
    - Resource cleanup
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    app.state.settings = settings

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    db = Database(settings)
    token_cache = ClientCredentialsTokenCache(settings.catalog)
    catalog_client = SpotifyClient(
        settings.catalog,
        token_provider=token_cache,
        rate_limiter=RateLimiter.for_catalog(),
    )

    try:
        if settings.database.create_tables_on_startup:
            await db.create_tables()
        if not settings.catalog.is_configured:
            logger.warning(
                "Spotify credentials missing: catalog list reads will be empty and detail "
                "reads answer 503 until SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET are set"
            )

        app.state.db = db
        app.state.token_cache = token_cache
        app.state.catalog_client = catalog_client

        yield
    finally:
        logger.info("Shutting down application")
        await catalog_client.close()
        await token_cache.close()
        await db.close()
        logger.info("Application shutdown complete")
