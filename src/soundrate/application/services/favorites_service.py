"""Favorites shelf and onboarding preferences."""

import logging

from soundrate.domain.entities import (
    MAX_ONBOARDING_ARTISTS,
    MIN_ONBOARDING_ARTISTS,
    Favorite,
    FavoriteArtistRef,
    FavoriteType,
    UserPreferences,
    utc_now,
)
from soundrate.domain.exceptions import ValidationError
from soundrate.domain.ports import IFavoriteRepository, IPreferencesRepository

logger = logging.getLogger(__name__)


class FavoritesService:
    """Top-5 shelves per item type and the favorite-artist seed list."""

    def __init__(
        self, favorites: IFavoriteRepository, preferences: IPreferencesRepository
    ) -> None:
        self.favorites = favorites
        self.preferences = preferences

    async def set_favorite(
        self,
        user_id: str,
        favorite_type: FavoriteType | str,
        position: int,
        item_id: str,
        item_name: str,
        item_image: str | None = None,
        item_artists: str | None = None,
    ) -> Favorite:
        """Put an item into a shelf slot, replacing whatever was there."""
        try:
            kind = FavoriteType(favorite_type)
        except ValueError as e:
            raise ValidationError(f"unknown favorite_type {favorite_type!r}") from e

        # Favorite.__post_init__ checks position and required fields
        favorite = Favorite(
            user_id=user_id,
            favorite_type=kind,
            position=position,
            item_id=item_id,
            item_name=item_name,
            item_image=item_image,
            item_artists=item_artists,
        )
        return await self.favorites.upsert(favorite)

    async def list_favorites(self, user_id: str) -> dict[FavoriteType, list[Favorite]]:
        """All shelves, each ordered by position. Every type is present."""
        grouped: dict[FavoriteType, list[Favorite]] = {kind: [] for kind in FavoriteType}
        for favorite in await self.favorites.list_by_user(user_id):
            grouped[favorite.favorite_type].append(favorite)
        for items in grouped.values():
            items.sort(key=lambda favorite: favorite.position)
        return grouped

    async def remove_favorite(
        self, user_id: str, favorite_type: FavoriteType | str, position: int
    ) -> bool:
        try:
            kind = FavoriteType(favorite_type)
        except ValueError as e:
            raise ValidationError(f"unknown favorite_type {favorite_type!r}") from e
        return await self.favorites.delete(user_id, kind, position)

    async def get_preferences(self, user_id: str) -> UserPreferences | None:
        return await self.preferences.get(user_id)

    async def save_favorite_artists(
        self, user_id: str, artists: list[FavoriteArtistRef]
    ) -> UserPreferences:
        """Replace the onboarding selection (3-10 distinct artists)."""
        unique: list[FavoriteArtistRef] = []
        seen: set[str] = set()
        for artist in artists:
            if artist.id and artist.id not in seen:
                seen.add(artist.id)
                unique.append(artist)
        if not MIN_ONBOARDING_ARTISTS <= len(unique) <= MAX_ONBOARDING_ARTISTS:
            raise ValidationError(
                f"select between {MIN_ONBOARDING_ARTISTS} and {MAX_ONBOARDING_ARTISTS} "
                f"artists, got {len(unique)}"
            )

        existing = await self.preferences.get(user_id)
        preferences = existing or UserPreferences(user_id=user_id)
        preferences.favorite_artists = unique
        preferences.updated_at = utc_now()
        saved = await self.preferences.save(preferences)
        logger.info(f"Saved {len(unique)} favorite artists for {user_id}")
        return saved


__all__ = ["FavoritesService"]
