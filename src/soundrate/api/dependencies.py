"""Dependency injection for API endpoints."""

from collections.abc import AsyncGenerator
from typing import cast

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from soundrate.application.services import (
    AutoFavoriteArtistHook,
    CatalogService,
    DiscoveryService,
    FavoritesService,
    FeedService,
    RatingService,
    SocialService,
)
from soundrate.config import Settings, get_settings
from soundrate.domain.exceptions import AuthenticationError
from soundrate.domain.ports import ICatalogClient
from soundrate.infrastructure.persistence.database import Database
from soundrate.infrastructure.persistence.repositories import (
    FavoriteRepository,
    FollowRepository,
    PreferencesRepository,
    ProfileRepository,
    RatingRepository,
)


def get_app_settings(request: Request) -> Settings:
    """Settings the app was started with (falls back to the process-wide ones)."""
    settings = getattr(request.app.state, "settings", None)
    return cast(Settings, settings) if settings is not None else get_settings()


# Hey future me, ONE session per request. Database.session_scope() commits when the endpoint
# returns normally and rolls back when anything raises, so repositories never commit.
# Use this in endpoint params like: "session: AsyncSession = Depends(get_db_session)"
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    db: Database = request.app.state.db
    async with db.session_scope() as session:
        yield session


# Authentication itself happens in front of us (the auth provider's proxy validated the session
# cookie). All we get is the trusted user id header.
def get_current_user_id(
    request: Request, settings: Settings = Depends(get_app_settings)
) -> str:
    """Authenticated user id, or AuthenticationError (401)."""
    user_id = request.headers.get(settings.api.user_id_header, "").strip()
    if not user_id:
        raise AuthenticationError("Not authenticated")
    return user_id


def get_optional_user_id(
    request: Request, settings: Settings = Depends(get_app_settings)
) -> str | None:
    """Authenticated user id if present (public pages that personalize when possible)."""
    user_id = request.headers.get(settings.api.user_id_header, "").strip()
    return user_id or None


def get_catalog_client(request: Request) -> ICatalogClient:
    return cast(ICatalogClient, request.app.state.catalog_client)


def get_catalog_service(
    client: ICatalogClient = Depends(get_catalog_client),
    settings: Settings = Depends(get_app_settings),
) -> CatalogService:
    return CatalogService(client, settings.catalog)


def get_discovery_service(
    catalog: CatalogService = Depends(get_catalog_service),
    session: AsyncSession = Depends(get_db_session),
) -> DiscoveryService:
    return DiscoveryService(catalog, PreferencesRepository(session))


def get_rating_service(session: AsyncSession = Depends(get_db_session)) -> RatingService:
    return RatingService(
        RatingRepository(session),
        hooks=[AutoFavoriteArtistHook(PreferencesRepository(session))],
    )


def get_feed_service(session: AsyncSession = Depends(get_db_session)) -> FeedService:
    return FeedService(
        RatingRepository(session), ProfileRepository(session), FollowRepository(session)
    )


def get_social_service(session: AsyncSession = Depends(get_db_session)) -> SocialService:
    return SocialService(FollowRepository(session), ProfileRepository(session))


def get_favorites_service(session: AsyncSession = Depends(get_db_session)) -> FavoritesService:
    return FavoritesService(FavoriteRepository(session), PreferencesRepository(session))
