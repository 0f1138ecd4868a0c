"""Review feeds: ratings with their authors' profiles."""

from fastapi import APIRouter, Depends, Query

from soundrate.api.dependencies import get_current_user_id, get_feed_service
from soundrate.api.schemas import ReviewResponse
from soundrate.application.services import FeedService
from soundrate.domain.entities import ItemType

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.get("/recent", response_model=list[ReviewResponse])
async def recent_reviews(
    limit: int = Query(10, ge=1, le=50),
    feed: FeedService = Depends(get_feed_service),
) -> list[ReviewResponse]:
    """Newest ratings from everyone."""
    return [ReviewResponse.from_entity(item) for item in await feed.recent_reviews(limit)]


@router.get("/feed", response_model=list[ReviewResponse])
async def following_feed(
    limit: int = Query(50, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    feed: FeedService = Depends(get_feed_service),
) -> list[ReviewResponse]:
    """Newest ratings from the users the caller follows."""
    items = await feed.following_feed(user_id, limit)
    return [ReviewResponse.from_entity(item) for item in items]


@router.get("/items/{item_id}", response_model=list[ReviewResponse])
async def item_reviews(
    item_id: str,
    item_type: ItemType | None = Query(None),
    feed: FeedService = Depends(get_feed_service),
) -> list[ReviewResponse]:
    """All reviews of one track or album (detail pages)."""
    items = await feed.item_reviews(item_id, item_type)
    return [ReviewResponse.from_entity(item) for item in items]


@router.get("/users/{user_id}", response_model=list[ReviewResponse])
async def user_reviews(
    user_id: str,
    limit: int = Query(10, ge=1, le=50),
    feed: FeedService = Depends(get_feed_service),
) -> list[ReviewResponse]:
    """A user's latest ratings (profile pages)."""
    items = await feed.user_reviews(user_id, limit)
    return [ReviewResponse.from_entity(item) for item in items]
