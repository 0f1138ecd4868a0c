"""Dashboard composition: personalized sections built from favorite artists."""

import asyncio
import logging
from dataclasses import dataclass, field

from soundrate.application.services.catalog_service import CatalogService
from soundrate.domain.dtos import CatalogAlbum, CatalogTrack
from soundrate.domain.entities import FavoriteArtistRef
from soundrate.domain.ports import IPreferencesRepository

logger = logging.getLogger(__name__)


@dataclass
class HomeFeed:
    """Everything the home screen shows for one user."""

    favorite_artists: list[FavoriteArtistRef] = field(default_factory=list)
    new_from_favorites: list[CatalogAlbum] = field(default_factory=list)
    favorite_artist_tracks: list[CatalogTrack] = field(default_factory=list)
    recommended_tracks: list[CatalogTrack] = field(default_factory=list)
    top_tracks: list[CatalogTrack] = field(default_factory=list)
    new_releases: list[CatalogAlbum] = field(default_factory=list)

    @property
    def needs_onboarding(self) -> bool:
        """True until the user picked favorite artists."""
        return not self.favorite_artists


class DiscoveryService:
    """Builds the home feed and the combined search page."""

    # Hey future me – every section below is a DEGRADING catalog read, so the gathers in
    # here never raise because of Spotify. A datastore error while loading preferences
    # does propagate: that's our own storage failing, not an optional upstream.
    def __init__(
        self,
        catalog: CatalogService,
        preferences_repository: IPreferencesRepository,
    ) -> None:
        self.catalog = catalog
        self.preferences_repository = preferences_repository

    async def get_home_feed(self, user_id: str, limit: int = 20) -> HomeFeed:
        preferences = await self.preferences_repository.get(user_id)
        favorites = list(preferences.favorite_artists) if preferences else []
        artist_ids = [artist.id for artist in favorites]

        if not artist_ids:
            logger.debug(f"DiscoveryService: {user_id} has no favorite artists yet")
            top_tracks, new_releases = await asyncio.gather(
                self.catalog.get_top_tracks(limit),
                self.catalog.get_new_releases(limit),
            )
            return HomeFeed(top_tracks=top_tracks, new_releases=new_releases)

        (
            new_from_favorites,
            favorite_artist_tracks,
            recommended,
            top_tracks,
            new_releases,
        ) = await asyncio.gather(
            self.catalog.get_artist_albums_from_list(artist_ids),
            self.catalog.get_artist_top_tracks_fanout(artist_ids),
            self.catalog.get_recommendations_by_artists(artist_ids, limit),
            self.catalog.get_top_tracks(limit),
            self.catalog.get_new_releases(limit),
        )
        return HomeFeed(
            favorite_artists=favorites,
            new_from_favorites=new_from_favorites,
            favorite_artist_tracks=favorite_artist_tracks,
            recommended_tracks=recommended,
            top_tracks=top_tracks,
            new_releases=new_releases,
        )


__all__ = ["DiscoveryService", "HomeFeed"]
