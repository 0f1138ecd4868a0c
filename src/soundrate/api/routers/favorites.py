"""Favorites shelf and onboarding preference endpoints."""

from fastapi import APIRouter, Depends, Query, Response, status

from soundrate.api.dependencies import get_current_user_id, get_favorites_service
from soundrate.api.schemas import (
    FavoriteArtistsRequest,
    FavoriteRequest,
    FavoriteResponse,
    FavoritesResponse,
    PreferencesResponse,
)
from soundrate.application.services import FavoritesService
from soundrate.domain.entities import FavoriteType
from soundrate.domain.exceptions import EntityNotFoundException

router = APIRouter(tags=["Favorites"])


@router.get("/favorites", response_model=FavoritesResponse)
async def list_favorites(
    user_id: str | None = Query(None, description="Whose shelf; defaults to the caller"),
    current_user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoritesResponse:
    owner = user_id or current_user_id
    grouped = await service.list_favorites(owner)

    def _convert(kind: FavoriteType) -> list[FavoriteResponse]:
        return [FavoriteResponse.from_entity(favorite) for favorite in grouped[kind]]

    return FavoritesResponse(
        user_id=owner,
        artists=_convert(FavoriteType.ARTIST),
        albums=_convert(FavoriteType.ALBUM),
        tracks=_convert(FavoriteType.TRACK),
    )


@router.put("/favorites", response_model=FavoriteResponse)
async def set_favorite(
    body: FavoriteRequest,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteResponse:
    """Put an item into slot 1..5 of a shelf, replacing the previous one."""
    favorite = await service.set_favorite(
        user_id,
        body.favorite_type,
        body.position,
        body.item_id,
        body.item_name,
        item_image=body.item_image,
        item_artists=body.item_artists,
    )
    return FavoriteResponse.from_entity(favorite)


@router.delete("/favorites", status_code=status.HTTP_204_NO_CONTENT)
async def remove_favorite(
    favorite_type: FavoriteType = Query(...),
    position: int = Query(..., ge=1, le=5),
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> Response:
    if not await service.remove_favorite(user_id, favorite_type, position):
        raise EntityNotFoundException("Favorite", f"{favorite_type.value}#{position}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> PreferencesResponse:
    """The caller's favorite artists (empty until onboarding is done)."""
    preferences = await service.get_preferences(user_id)
    if preferences is None:
        return PreferencesResponse(user_id=user_id)
    return PreferencesResponse.from_entity(preferences)


@router.put("/preferences/artists", response_model=PreferencesResponse)
async def save_favorite_artists(
    body: FavoriteArtistsRequest,
    user_id: str = Depends(get_current_user_id),
    service: FavoritesService = Depends(get_favorites_service),
) -> PreferencesResponse:
    """Onboarding: store 3 to 10 favorite artists."""
    preferences = await service.save_favorite_artists(
        user_id, [artist.to_entity() for artist in body.artists]
    )
    return PreferencesResponse.from_entity(preferences)
