"""Rating endpoints for the current user."""

from fastapi import APIRouter, Depends, Query, Response, status

from soundrate.api.dependencies import get_current_user_id, get_rating_service
from soundrate.api.schemas import RatingRequest, RatingResponse, RatingSummaryResponse
from soundrate.application.services import RatingService
from soundrate.domain.entities import ItemType, RatingInput
from soundrate.domain.exceptions import EntityNotFoundException

router = APIRouter(prefix="/ratings", tags=["Ratings"])


@router.post("", response_model=RatingResponse)
async def save_rating(
    body: RatingRequest,
    user_id: str = Depends(get_current_user_id),
    service: RatingService = Depends(get_rating_service),
) -> RatingResponse:
    """Create or update the caller's rating (one per item)."""
    rating = await service.save_rating(
        user_id,
        RatingInput(
            item_id=body.item_id,
            item_type=body.item_type,
            item_name=body.item_name,
            rating=body.rating,
            item_image=body.item_image,
            item_artists=body.item_artists,
            review=body.review,
            artist_id=body.artist_id,
            artist_name=body.artist_name,
        ),
    )
    return RatingResponse.from_entity(rating)


@router.get("", response_model=list[RatingResponse])
async def list_ratings(
    item_id: str | None = Query(None, description="Only the rating of this item"),
    item_type: ItemType | None = Query(None),
    user_id: str = Depends(get_current_user_id),
    service: RatingService = Depends(get_rating_service),
) -> list[RatingResponse]:
    """The caller's ratings, or their single rating of ?item_id (empty list if unrated)."""
    if item_id:
        rating = await service.get_rating(user_id, item_id)
        return [RatingResponse.from_entity(rating)] if rating else []
    ratings = await service.list_ratings(user_id, item_type)
    return [RatingResponse.from_entity(rating) for rating in ratings]


@router.get("/summary", response_model=RatingSummaryResponse)
async def get_rating_summary(
    item_id: str = Query(..., min_length=1),
    service: RatingService = Depends(get_rating_service),
) -> RatingSummaryResponse:
    """Average score and count over all users."""
    return RatingSummaryResponse.from_entity(await service.get_summary(item_id))


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rating(
    item_id: str = Query(..., min_length=1),
    user_id: str = Depends(get_current_user_id),
    service: RatingService = Depends(get_rating_service),
) -> Response:
    """Delete the caller's rating; 404 when there was none."""
    if not await service.delete_rating(user_id, item_id):
        raise EntityNotFoundException("Rating", item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
