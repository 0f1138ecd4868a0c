"""Follows, user search and profile editing."""

import logging

from soundrate.domain.entities import FollowStats, Profile
from soundrate.domain.exceptions import (
    BusinessRuleViolation,
    DuplicateEntityException,
    ValidationError,
)
from soundrate.domain.ports import IFollowRepository, IProfileRepository

logger = logging.getLogger(__name__)

MIN_USER_QUERY_LENGTH = 2


class SocialService:
    """Social graph and profile operations."""

    def __init__(self, follows: IFollowRepository, profiles: IProfileRepository) -> None:
        self.follows = follows
        self.profiles = profiles

    async def follow(self, follower_id: str, following_id: str) -> None:
        """
        Follow another user.

        Raises:
            ValidationError: If either id is blank
            BusinessRuleViolation: If the user tries to follow themself
            DuplicateEntityException: If the pair already exists
        """
        if not follower_id or not following_id:
            raise ValidationError("follower_id and following_id are required")
        if follower_id == following_id:
            raise BusinessRuleViolation("Cannot follow yourself")
        if await self.follows.exists(follower_id, following_id):
            raise DuplicateEntityException("Follow", f"{follower_id}->{following_id}")

        await self.follows.add(follower_id, following_id)
        logger.info(f"{follower_id} now follows {following_id}")

    async def unfollow(self, follower_id: str, following_id: str) -> bool:
        if not follower_id or not following_id:
            raise ValidationError("follower_id and following_id are required")
        return await self.follows.remove(follower_id, following_id)

    async def get_follow_stats(
        self, user_id: str, viewer_id: str | None = None
    ) -> FollowStats:
        """Counts for a profile page; is_following is from the viewer's side."""
        follower_count = await self.follows.count_followers(user_id)
        following_count = await self.follows.count_following(user_id)
        is_following = False
        if viewer_id and viewer_id != user_id:
            is_following = await self.follows.exists(viewer_id, user_id)
        return FollowStats(
            follower_count=follower_count,
            following_count=following_count,
            is_following=is_following,
        )

    async def search_users(self, query: str, limit: int = 10) -> list[Profile]:
        """Case-insensitive username substring search. Short queries → []."""
        fragment = (query or "").strip()
        if len(fragment) < MIN_USER_QUERY_LENGTH:
            return []
        return await self.profiles.search_by_username(fragment, limit)

    async def get_profile(self, user_id: str) -> Profile | None:
        return await self.profiles.get(user_id)

    async def update_profile(
        self,
        user_id: str,
        username: str | None = None,
        bio: str | None = None,
        avatar_url: str | None = None,
    ) -> Profile:
        """Create or update the caller's profile; None means "leave unchanged"."""
        existing = await self.profiles.get(user_id)
        if existing is None:
            if not username:
                raise ValidationError("username is required to create a profile")
            profile = Profile(id=user_id, username=username, bio=bio, avatar_url=avatar_url)
        else:
            profile = Profile(
                id=user_id,
                username=username if username is not None else existing.username,
                bio=bio if bio is not None else existing.bio,
                avatar_url=avatar_url if avatar_url is not None else existing.avatar_url,
            )
        return await self.profiles.upsert(profile)


__all__ = ["SocialService"]
