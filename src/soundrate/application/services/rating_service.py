"""Rating write path with post-write hooks."""

import logging
from collections.abc import Sequence
from typing import Protocol

from soundrate.domain.entities import (
    FavoriteArtistRef,
    ItemType,
    Rating,
    RatingInput,
    RatingSummary,
)
from soundrate.domain.exceptions import ValidationError
from soundrate.domain.ports import IPreferencesRepository, IRatingRepository

logger = logging.getLogger(__name__)


class RatingHook(Protocol):
    """Side effect that runs after a rating was stored."""

    name: str

    async def after_save(self, rating: Rating, command: RatingInput) -> None: ...


class AutoFavoriteArtistHook:
    """Adds the primary artist of a highly rated track to the user's favorites.

    Hey future me – this used to be the classic "fire and forget" side effect. It's now
    an explicit hook: it runs AFTER the rating upsert and RatingService swallows (and
    logs) anything it raises. Don't make it raise on purpose, and don't move it before
    the upsert.
    """

    name = "auto_favorite_artist"

    def __init__(
        self, preferences: IPreferencesRepository, threshold: float = 4.0
    ) -> None:
        self.preferences = preferences
        self.threshold = threshold

    def applies_to(self, rating: Rating, command: RatingInput) -> bool:
        return (
            rating.item_type == ItemType.TRACK
            and rating.rating >= self.threshold
            and bool(command.artist_id)
            and bool(command.artist_name)
        )

    async def after_save(self, rating: Rating, command: RatingInput) -> None:
        if not self.applies_to(rating, command):
            return
        artist = FavoriteArtistRef(
            id=str(command.artist_id),
            name=str(command.artist_name),
            image_url=rating.item_image,
        )
        added = await self.preferences.add_favorite_artist(rating.user_id, artist)
        if added:
            logger.info(f"Auto-favorited artist {artist.id} for user {rating.user_id}")


class RatingService:
    """Create, update, read and delete ratings."""

    def __init__(
        self, ratings: IRatingRepository, hooks: Sequence[RatingHook] = ()
    ) -> None:
        self.ratings = ratings
        self.hooks = list(hooks)

    async def save_rating(self, user_id: str, command: RatingInput) -> Rating:
        """Validate and upsert a rating, then run post-write hooks.

        Args:
            user_id: Authenticated user
            command: Rating fields plus the optional primary artist of a track

        Returns:
            The stored rating

        Raises:
            ValidationError: Before any datastore call if the input is malformed
        """
        if not user_id:
            raise ValidationError("user_id is required")
        command.validate()

        stored = await self.ratings.upsert(command.to_rating(user_id))

        for hook in self.hooks:
            try:
                await hook.after_save(stored, command)
            except Exception:
                # The rating is already stored; a hook must never fail the write
                logger.exception(
                    f"Rating hook {hook.name} failed for {user_id}/{stored.item_id}"
                )
        return stored

    async def get_rating(self, user_id: str, item_id: str) -> Rating | None:
        return await self.ratings.get(user_id, item_id)

    async def list_ratings(
        self, user_id: str, item_type: ItemType | None = None
    ) -> list[Rating]:
        return await self.ratings.list_by_user(user_id, item_type)

    async def delete_rating(self, user_id: str, item_id: str) -> bool:
        if not item_id:
            raise ValidationError("item_id is required")
        deleted = await self.ratings.delete(user_id, item_id)
        if deleted:
            logger.debug(f"Deleted rating {user_id}/{item_id}")
        return deleted

    async def get_summary(self, item_id: str) -> RatingSummary:
        """Average and count for one item (0.0 / 0 when unrated)."""
        return await self.ratings.summarize(item_id)


__all__ = ["AutoFavoriteArtistHook", "RatingHook", "RatingService"]
