"""Review feeds: ratings joined with their authors' profiles."""

import logging

from soundrate.domain.entities import ItemType, ProfileSummary, Rating, RatingWithProfile
from soundrate.domain.ports import IFollowRepository, IProfileRepository, IRatingRepository

logger = logging.getLogger(__name__)


# Hey future me – profiles live in their own table with no join available to the feed
# queries, so this does the join by hand: ONE batched lookup for the distinct user ids,
# then a placeholder for anyone who has no profile row (deleted account, or the profile
# was never created). Output order == input order, always.
async def stitch_profiles(
    ratings: list[Rating], profile_repository: IProfileRepository
) -> list[RatingWithProfile]:
    """Attach a ProfileSummary to every rating without reordering."""
    if not ratings:
        return []

    user_ids = list(dict.fromkeys(rating.user_id for rating in ratings))
    profiles = await profile_repository.get_by_ids(user_ids)
    by_id = {profile.id: ProfileSummary.from_profile(profile) for profile in profiles}

    missing = [user_id for user_id in user_ids if user_id not in by_id]
    if missing:
        logger.debug(f"stitch_profiles: {len(missing)} user(s) without a profile row")

    placeholder = ProfileSummary.placeholder()
    return [
        RatingWithProfile(rating=rating, profile=by_id.get(rating.user_id, placeholder))
        for rating in ratings
    ]


class FeedService:
    """Recent reviews, following feed and per-item/per-user review lists."""

    def __init__(
        self,
        ratings: IRatingRepository,
        profiles: IProfileRepository,
        follows: IFollowRepository,
    ) -> None:
        self.ratings = ratings
        self.profiles = profiles
        self.follows = follows

    async def recent_reviews(self, limit: int = 10) -> list[RatingWithProfile]:
        """Newest ratings across all users."""
        ratings = await self.ratings.list_recent(limit)
        return await stitch_profiles(ratings, self.profiles)

    async def following_feed(self, user_id: str, limit: int = 50) -> list[RatingWithProfile]:
        """Newest ratings from the users this user follows."""
        following_ids = await self.follows.list_following_ids(user_id)
        if not following_ids:
            return []
        ratings = await self.ratings.list_by_users(following_ids, limit)
        return await stitch_profiles(ratings, self.profiles)

    async def item_reviews(
        self, item_id: str, item_type: ItemType | None = None
    ) -> list[RatingWithProfile]:
        """All ratings of one track/album, newest first."""
        ratings = await self.ratings.list_by_item(item_id, item_type)
        return await stitch_profiles(ratings, self.profiles)

    async def user_reviews(self, user_id: str, limit: int = 10) -> list[RatingWithProfile]:
        ratings = await self.ratings.list_by_user(user_id, limit=limit)
        return await stitch_profiles(ratings, self.profiles)


__all__ = ["FeedService", "stitch_profiles"]
