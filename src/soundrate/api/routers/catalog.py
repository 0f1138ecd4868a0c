"""Catalog API endpoints (Spotify proxy).

Hey future me - these endpoints never talk to SpotifyClient directly, always through
CatalogService, so the degrade policy holds everywhere: list endpoints answer 200 with an
empty list when Spotify fails, detail endpoints (artist, album, track, artist albums and
top tracks) answer 502.
"""

import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from soundrate.api.dependencies import get_catalog_service
from soundrate.application.services import CatalogService
from soundrate.domain.dtos import CatalogAlbum, CatalogArtist, CatalogTrack

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["Catalog"])


class CatalogSearchResponse(BaseModel):
    """Search results; kinds that were not requested stay empty."""

    query: str = Field(..., description="Original search query")
    tracks: list[CatalogTrack] = Field(default_factory=list)
    albums: list[CatalogAlbum] = Field(default_factory=list)
    artists: list[CatalogArtist] = Field(default_factory=list)


@router.get("/search", response_model=CatalogSearchResponse)
async def search_catalog(
    q: str = Query(..., min_length=1, description="Search query"),
    kind: str | None = Query(
        None, pattern="^(track|album|artist)$", description="Restrict to one kind"
    ),
    limit: int = Query(20, ge=1, le=50, description="Results per kind"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> CatalogSearchResponse:
    """Search tracks, albums and artists (or one kind with ?kind=)."""
    if kind is None:
        results = await catalog.search_all(q, limit)
        return CatalogSearchResponse(
            query=q, tracks=results.tracks, albums=results.albums, artists=results.artists
        )

    items = await catalog.search(q, kind, limit)
    return CatalogSearchResponse(query=q, **{f"{kind}s": items})


@router.get("/artists/{artist_id}", response_model=CatalogArtist)
async def get_artist(
    artist_id: str, catalog: CatalogService = Depends(get_catalog_service)
) -> CatalogArtist:
    return await catalog.get_artist(artist_id)


@router.get("/artists/{artist_id}/top-tracks", response_model=list[CatalogTrack])
async def get_artist_top_tracks(
    artist_id: str,
    limit: int = Query(10, ge=1, le=10),
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[CatalogTrack]:
    return await catalog.get_artist_top_tracks(artist_id, limit)


@router.get("/artists/{artist_id}/albums", response_model=list[CatalogAlbum])
async def get_artist_albums(
    artist_id: str,
    limit: int = Query(20, ge=1, le=50),
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[CatalogAlbum]:
    return await catalog.get_artist_albums(artist_id, limit)


@router.get("/artists/{artist_id}/related", response_model=list[CatalogArtist])
async def get_related_artists(
    artist_id: str,
    limit: int = Query(10, ge=1, le=20),
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[CatalogArtist]:
    """'Fans also like' artists (empty when Spotify has none or fails)."""
    return await catalog.get_related_artists(artist_id, limit)


@router.get("/albums/{album_id}", response_model=CatalogAlbum)
async def get_album(
    album_id: str, catalog: CatalogService = Depends(get_catalog_service)
) -> CatalogAlbum:
    return await catalog.get_album(album_id)


@router.get("/tracks/{track_id}", response_model=CatalogTrack)
async def get_track(
    track_id: str, catalog: CatalogService = Depends(get_catalog_service)
) -> CatalogTrack:
    return await catalog.get_track(track_id)


@router.get("/new-releases", response_model=list[CatalogAlbum])
async def get_new_releases(
    limit: int = Query(20, ge=1, le=50),
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[CatalogAlbum]:
    return await catalog.get_new_releases(limit)


@router.get("/top-tracks", response_model=list[CatalogTrack])
async def get_top_tracks(
    limit: int = Query(20, ge=1, le=50),
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[CatalogTrack]:
    return await catalog.get_top_tracks(limit)


@router.get("/recommendations", response_model=list[CatalogTrack])
async def get_recommendations(
    genre: str | None = Query(None, description="One free-text genre"),
    genres: str | None = Query(None, description="Comma separated genres"),
    artist_ids: str | None = Query(None, description="Comma separated seed artist ids"),
    limit: int = Query(20, ge=1, le=50),
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[CatalogTrack]:
    """Seeded recommendations. Never fails: falls back to search, then top tracks."""
    if artist_ids:
        ids = [value.strip() for value in artist_ids.split(",") if value.strip()]
        return await catalog.get_recommendations_by_artists(ids, limit)
    if genres:
        names = [value.strip() for value in genres.split(",") if value.strip()]
        return await catalog.get_recommendations_by_user_genres(names, limit)
    if genre:
        return await catalog.get_recommendations_by_genre(genre, limit)
    return await catalog.get_top_tracks(limit)


@router.get("/genres", response_model=list[str])
async def get_genres(catalog: CatalogService = Depends(get_catalog_service)) -> list[str]:
    """Genre seeds accepted by /recommendations."""
    return await catalog.get_available_genres()
