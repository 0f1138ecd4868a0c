"""Home feed endpoint (the dashboard)."""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from soundrate.api.dependencies import get_current_user_id, get_discovery_service
from soundrate.api.schemas import FavoriteArtistSchema
from soundrate.application.services import DiscoveryService
from soundrate.domain.dtos import CatalogAlbum, CatalogTrack

router = APIRouter(tags=["Home"])


class HomeFeedResponse(BaseModel):
    needs_onboarding: bool = Field(..., description="True until favorite artists are picked")
    favorite_artists: list[FavoriteArtistSchema] = Field(default_factory=list)
    new_from_favorites: list[CatalogAlbum] = Field(default_factory=list)
    favorite_artist_tracks: list[CatalogTrack] = Field(default_factory=list)
    recommended_tracks: list[CatalogTrack] = Field(default_factory=list)
    top_tracks: list[CatalogTrack] = Field(default_factory=list)
    new_releases: list[CatalogAlbum] = Field(default_factory=list)


@router.get("/home", response_model=HomeFeedResponse)
async def get_home_feed(
    limit: int = Query(20, ge=1, le=50),
    user_id: str = Depends(get_current_user_id),
    discovery: DiscoveryService = Depends(get_discovery_service),
) -> HomeFeedResponse:
    """Personalized dashboard. Sections degrade to empty lists, never to an error."""
    feed = await discovery.get_home_feed(user_id, limit)
    return HomeFeedResponse(
        needs_onboarding=feed.needs_onboarding,
        favorite_artists=[
            FavoriteArtistSchema.from_entity(artist) for artist in feed.favorite_artists
        ],
        new_from_favorites=feed.new_from_favorites,
        favorite_artist_tracks=feed.favorite_artist_tracks,
        recommended_tracks=feed.recommended_tracks,
        top_tracks=feed.top_tracks,
        new_releases=feed.new_releases,
    )
