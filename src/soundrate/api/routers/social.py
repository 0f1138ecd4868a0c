"""Follow graph and user profile endpoints."""

from fastapi import APIRouter, Depends, Query, status

from soundrate.api.dependencies import (
    get_current_user_id,
    get_optional_user_id,
    get_social_service,
)
from soundrate.api.schemas import (
    FollowRequest,
    FollowStatsResponse,
    ProfileResponse,
    ProfileUpdateRequest,
)
from soundrate.application.services import SocialService
from soundrate.domain.exceptions import EntityNotFoundException

router = APIRouter(tags=["Social"])


@router.post("/follow", status_code=status.HTTP_201_CREATED)
async def follow_user(
    body: FollowRequest,
    user_id: str = Depends(get_current_user_id),
    service: SocialService = Depends(get_social_service),
) -> dict[str, bool]:
    await service.follow(user_id, body.following_id)
    return {"success": True}


@router.delete("/follow")
async def unfollow_user(
    following_id: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    service: SocialService = Depends(get_social_service),
) -> dict[str, bool]:
    removed = await service.unfollow(user_id, following_id)
    return {"success": removed}


@router.get("/follow", response_model=FollowStatsResponse)
async def follow_stats(
    user_id: str = Query(..., min_length=1, description="Profile to count for"),
    viewer_id: str | None = Depends(get_optional_user_id),
    service: SocialService = Depends(get_social_service),
) -> FollowStatsResponse:
    """Follower/following counts; is_following is from the caller's side."""
    stats = await service.get_follow_stats(user_id, viewer_id)
    return FollowStatsResponse.from_entity(user_id, stats)


@router.get("/users", response_model=list[ProfileResponse])
async def search_users(
    q: str = Query("", description="Username fragment (at least 2 characters)"),
    limit: int = Query(10, ge=1, le=50),
    service: SocialService = Depends(get_social_service),
) -> list[ProfileResponse]:
    profiles = await service.search_users(q, limit)
    return [ProfileResponse.from_entity(profile) for profile in profiles]


# Declared before /users/{user_id} so "me" is not taken for an id
@router.put("/users/me", response_model=ProfileResponse)
async def update_my_profile(
    body: ProfileUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: SocialService = Depends(get_social_service),
) -> ProfileResponse:
    profile = await service.update_profile(
        user_id, username=body.username, bio=body.bio, avatar_url=body.avatar_url
    )
    return ProfileResponse.from_entity(profile)


@router.get("/users/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str, service: SocialService = Depends(get_social_service)
) -> ProfileResponse:
    profile = await service.get_profile(user_id)
    if profile is None:
        raise EntityNotFoundException("Profile", user_id)
    return ProfileResponse.from_entity(profile)

