"""Tests for favorites shelves and onboarding preferences."""

from unittest.mock import AsyncMock

import pytest

from soundrate.application.services.favorites_service import FavoritesService
from soundrate.domain.entities import (
    Favorite,
    FavoriteArtistRef,
    FavoriteType,
    UserPreferences,
)
from soundrate.domain.exceptions import ValidationError
from soundrate.domain.ports import IFavoriteRepository, IPreferencesRepository


def artists(*ids: str) -> list[FavoriteArtistRef]:
    return [FavoriteArtistRef(id=artist_id, name=f"Artist {artist_id}") for artist_id in ids]


@pytest.fixture
def favorites() -> AsyncMock:
    repo = AsyncMock(spec=IFavoriteRepository)
    repo.upsert.side_effect = lambda favorite: favorite
    return repo


@pytest.fixture
def preferences() -> AsyncMock:
    repo = AsyncMock(spec=IPreferencesRepository)
    repo.get.return_value = None
    repo.save.side_effect = lambda prefs: prefs
    return repo


@pytest.fixture
def service(favorites: AsyncMock, preferences: AsyncMock) -> FavoritesService:
    return FavoritesService(favorites, preferences)


class TestShelves:
    async def test_set_favorite_accepts_string_type(
        self, service: FavoritesService, favorites: AsyncMock
    ) -> None:
        favorite = await service.set_favorite("alice", "album", 2, "al1", "Discovery")

        assert favorite.favorite_type == FavoriteType.ALBUM
        favorites.upsert.assert_awaited_once()

    @pytest.mark.parametrize("position", [0, 6])
    async def test_position_out_of_range(
        self, service: FavoritesService, favorites: AsyncMock, position: int
    ) -> None:
        with pytest.raises(ValidationError):
            await service.set_favorite("alice", "track", position, "t1", "Track")
        favorites.upsert.assert_not_called()

    async def test_unknown_type_is_rejected(self, service: FavoritesService) -> None:
        with pytest.raises(ValidationError):
            await service.set_favorite("alice", "playlist", 1, "p1", "Mix")

    async def test_list_groups_every_type_by_position(
        self, service: FavoritesService, favorites: AsyncMock
    ) -> None:
        favorites.list_by_user.return_value = [
            Favorite("alice", FavoriteType.TRACK, 3, "t3", "Three"),
            Favorite("alice", FavoriteType.TRACK, 1, "t1", "One"),
        ]

        grouped = await service.list_favorites("alice")

        assert set(grouped) == set(FavoriteType)
        assert [f.position for f in grouped[FavoriteType.TRACK]] == [1, 3]
        assert grouped[FavoriteType.ALBUM] == []


class TestFavoriteArtists:
    async def test_saves_deduplicated_selection_in_order(
        self, service: FavoritesService, preferences: AsyncMock
    ) -> None:
        saved = await service.save_favorite_artists("alice", artists("c", "a", "c", "b"))

        assert saved.artist_ids == ["c", "a", "b"]
        preferences.save.assert_awaited_once()

    @pytest.mark.parametrize("count", [2, 11])
    async def test_selection_size_is_enforced(
        self, service: FavoritesService, preferences: AsyncMock, count: int
    ) -> None:
        with pytest.raises(ValidationError):
            await service.save_favorite_artists(
                "alice", artists(*(str(i) for i in range(count)))
            )
        preferences.save.assert_not_called()

    async def test_replaces_existing_selection(
        self, service: FavoritesService, preferences: AsyncMock
    ) -> None:
        preferences.get.return_value = UserPreferences(
            user_id="alice", favorite_artists=artists("old")
        )

        saved = await service.save_favorite_artists("alice", artists("x", "y", "z"))

        assert saved.artist_ids == ["x", "y", "z"]
