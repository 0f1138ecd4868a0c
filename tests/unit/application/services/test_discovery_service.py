"""Tests for home feed composition and combined search."""

from unittest.mock import AsyncMock

import pytest

from soundrate.application.services.catalog_service import CatalogService
from soundrate.application.services.discovery_service import DiscoveryService
from soundrate.domain.dtos import CatalogAlbum, CatalogTrack
from soundrate.domain.entities import FavoriteArtistRef, UserPreferences
from soundrate.domain.ports import IPreferencesRepository


@pytest.fixture
def catalog() -> AsyncMock:
    mock = AsyncMock(spec=CatalogService)
    mock.get_top_tracks.return_value = [CatalogTrack(id="top", name="Top")]
    mock.get_new_releases.return_value = [CatalogAlbum(id="new", name="New")]
    mock.get_artist_albums_from_list.return_value = [CatalogAlbum(id="fav-al", name="Fav")]
    mock.get_artist_top_tracks_fanout.return_value = [CatalogTrack(id="fav-t", name="Fav")]
    mock.get_recommendations_by_artists.return_value = [CatalogTrack(id="rec", name="Rec")]
    return mock


@pytest.fixture
def preferences() -> AsyncMock:
    return AsyncMock(spec=IPreferencesRepository)


@pytest.fixture
def service(catalog: AsyncMock, preferences: AsyncMock) -> DiscoveryService:
    return DiscoveryService(catalog, preferences)


class TestHomeFeed:
    async def test_new_user_gets_generic_sections_only(
        self, service: DiscoveryService, catalog: AsyncMock, preferences: AsyncMock
    ) -> None:
        preferences.get.return_value = None

        feed = await service.get_home_feed("alice")

        assert feed.needs_onboarding
        assert [t.id for t in feed.top_tracks] == ["top"]
        assert [a.id for a in feed.new_releases] == ["new"]
        assert feed.recommended_tracks == []
        catalog.get_artist_albums_from_list.assert_not_called()

    async def test_favorites_drive_personal_sections(
        self, service: DiscoveryService, catalog: AsyncMock, preferences: AsyncMock
    ) -> None:
        preferences.get.return_value = UserPreferences(
            user_id="alice",
            favorite_artists=[FavoriteArtistRef(id="a1", name="Air")],
        )

        feed = await service.get_home_feed("alice", limit=10)

        assert not feed.needs_onboarding
        assert [a.id for a in feed.new_from_favorites] == ["fav-al"]
        assert [t.id for t in feed.favorite_artist_tracks] == ["fav-t"]
        assert [t.id for t in feed.recommended_tracks] == ["rec"]
        catalog.get_recommendations_by_artists.assert_awaited_once_with(["a1"], 10)

