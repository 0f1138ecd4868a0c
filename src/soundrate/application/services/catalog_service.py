# Hey future me – this is THE catalog aggregator. Every screen that shows Spotify data goes
# through here, never through SpotifyClient directly.
"""
CatalogService: read intents over the Spotify catalog.

Two error policies live side by side in this service:

1. **Detail reads** (artist, artist top tracks, artist albums, album, track) are
   single calls that PROPAGATE failures. There is no partial result to show.
2. **List / aggregate reads** (search, new releases, top tracks, fan-outs,
   recommendations) DEGRADE to an empty list and log a warning. One failing
   artist must not blank the whole dashboard.

Fan-out:
```
artist_ids[:N] → asyncio.gather(per-artist call, ...) → failing branch = []
                        ↓
            merge (→ dedup by id → sort by release date)   [albums]
            concat in artist-id order                      [top tracks]
```

Recommendations never raise: recommendations → search → top tracks.
"""

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TypeVar

from soundrate.config.settings import CatalogSettings
from soundrate.domain.dtos import CatalogAlbum, CatalogArtist, CatalogTrack, SearchResponse
from soundrate.domain.exceptions import DomainException, ValidationError
from soundrate.domain.ports import ICatalogClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RECOMMENDATION_SEEDS = 5


@dataclass
class SearchResults:
    """Combined search across all item kinds."""

    query: str
    tracks: list[CatalogTrack] = field(default_factory=list)
    albums: list[CatalogAlbum] = field(default_factory=list)
    artists: list[CatalogArtist] = field(default_factory=list)


# Free-text genres (what users type or what artist.genres contains) → Spotify seed ids
GENRE_SEED_MAP: dict[str, str] = {
    "rock": "rock",
    "pop": "pop",
    "hip-hop": "hip-hop",
    "hip hop": "hip-hop",
    "rap": "hip-hop",
    "jazz": "jazz",
    "classical": "classical",
    "electronic": "electronic",
    "edm": "edm",
    "dance": "dance",
    "country": "country",
    "r&b": "r-n-b",
    "rnb": "r-n-b",
    "indie": "indie",
    "alternative": "alt-rock",
    "metal": "metal",
    "folk": "folk",
    "blues": "blues",
    "reggae": "reggae",
    "latin": "latin",
    "soul": "soul",
    "funk": "funk",
    "punk": "punk",
    "k-pop": "k-pop",
    "kpop": "k-pop",
}


def normalize_genre(genre: str) -> str:
    """Map a free-text genre onto a recommendation seed id."""
    key = genre.strip().lower()
    return GENRE_SEED_MAP.get(key, key.replace(" ", "-"))


def _popularity_key(track: CatalogTrack) -> int:
    # Missing popularity sorts after every known value
    return track.popularity if track.popularity is not None else -1


class CatalogService:
    """Catalog reads with the detail-propagates / list-degrades policy."""

    def __init__(self, client: ICatalogClient, settings: CatalogSettings) -> None:
        self.client = client
        self.settings = settings

    async def _degrade(self, operation: str, call: Awaitable[list[T]]) -> list[T]:
        """Await a list read, turning any catalog failure into an empty list."""
        try:
            return await call
        except DomainException as e:
            logger.warning(f"CatalogService: {operation} degraded to empty: {e.message}")
            return []

    # ─────────────────────────────────────────────────────────────────────────
    # SEARCH
    # ─────────────────────────────────────────────────────────────────────────

    async def search(
        self, query: str, kind: str, limit: int = 20
    ) -> list[CatalogTrack] | list[CatalogAlbum] | list[CatalogArtist]:
        """Search one kind of item. Upstream failure → []."""
        if not query or not query.strip():
            raise ValidationError("search query cannot be empty")
        if kind not in ("track", "album", "artist"):
            raise ValidationError(f"kind must be one of track, album, artist, got {kind!r}")

        async def _search() -> list[CatalogTrack] | list[CatalogAlbum] | list[CatalogArtist]:
            response = await self.client.search(query.strip(), kind, limit)
            return _items_for(response, kind)

        return await self._degrade(f"search({kind})", _search())

    async def search_tracks(self, query: str, limit: int = 20) -> list[CatalogTrack]:
        return await self.search(query, "track", limit)  # type: ignore[return-value]

    async def search_albums(self, query: str, limit: int = 20) -> list[CatalogAlbum]:
        return await self.search(query, "album", limit)  # type: ignore[return-value]

    async def search_artists(self, query: str, limit: int = 20) -> list[CatalogArtist]:
        return await self.search(query, "artist", limit)  # type: ignore[return-value]

    async def search_all(self, query: str, limit: int = 20) -> SearchResults:
        """Search tracks, albums and artists concurrently."""
        tracks, albums, artists = await asyncio.gather(
            self.search_tracks(query, limit),
            self.search_albums(query, limit),
            self.search_artists(query, limit),
        )
        return SearchResults(query=query, tracks=tracks, albums=albums, artists=artists)

    # ─────────────────────────────────────────────────────────────────────────
    # DETAIL READS (errors propagate)
    # ─────────────────────────────────────────────────────────────────────────

    async def get_artist(self, artist_id: str) -> CatalogArtist:
        _require_id(artist_id, "artist_id")
        return await self.client.get_artist(artist_id)

    async def get_artist_top_tracks(self, artist_id: str, limit: int = 10) -> list[CatalogTrack]:
        _require_id(artist_id, "artist_id")
        tracks = await self.client.get_artist_top_tracks(artist_id)
        return tracks[:limit]

    async def get_artist_albums(self, artist_id: str, limit: int = 20) -> list[CatalogAlbum]:
        _require_id(artist_id, "artist_id")
        return await self.client.get_artist_albums(artist_id, limit=limit)

    async def get_album(self, album_id: str) -> CatalogAlbum:
        _require_id(album_id, "album_id")
        return await self.client.get_album(album_id)

    async def get_track(self, track_id: str) -> CatalogTrack:
        _require_id(track_id, "track_id")
        return await self.client.get_track(track_id)

    # ─────────────────────────────────────────────────────────────────────────
    # LIST READS (errors degrade to [])
    # ─────────────────────────────────────────────────────────────────────────

    async def get_new_releases(self, limit: int = 20) -> list[CatalogAlbum]:
        return await self._degrade("new_releases", self.client.get_new_releases(limit))

    async def get_top_tracks(self, limit: int = 20) -> list[CatalogTrack]:
        """Popular recent tracks.

        Hey future me – there is no trending endpoint for client-credentials apps, so this
        is a popularity-sorted search over a recency query. It's a PLACEHOLDER for a real
        trending feed, don't build anything clever on top of its ordering.
        """

        async def _top() -> list[CatalogTrack]:
            response = await self.client.search(self.settings.top_tracks_query, "track", limit)
            tracks = response.tracks.items if response.tracks else []
            return sorted(tracks, key=_popularity_key, reverse=True)

        return await self._degrade("top_tracks", _top())

    async def get_related_artists(self, artist_id: str, limit: int = 10) -> list[CatalogArtist]:
        if not artist_id:
            return []

        async def _related() -> list[CatalogArtist]:
            artists = await self.client.get_related_artists(artist_id)
            return artists[:limit]

        return await self._degrade("related_artists", _related())

    async def get_several_artists(self, artist_ids: list[str]) -> list[CatalogArtist]:
        ids = [artist_id for artist_id in artist_ids if artist_id]
        if not ids:
            return []
        return await self._degrade("several_artists", self.client.get_several_artists(ids))

    async def get_available_genres(self) -> list[str]:
        return await self._degrade("genre_seeds", self.client.get_available_genre_seeds())

    # ─────────────────────────────────────────────────────────────────────────
    # FAN-OUT
    # ─────────────────────────────────────────────────────────────────────────

    async def get_artist_albums_from_list(
        self, artist_ids: list[str], limit_per_artist: int = 3
    ) -> list[CatalogAlbum]:
        """Latest albums across several artists.

        Per-artist calls run in parallel, a failing artist contributes nothing.
        Result has unique album ids (first occurrence wins) and is sorted by
        release date, newest first. Ties keep merge order.
        """
        ids = [artist_id for artist_id in artist_ids if artist_id][
            : self.settings.max_fanout_artists
        ]
        if not ids:
            return []

        results = await asyncio.gather(
            *(
                self._degrade(
                    f"artist_albums({artist_id})",
                    self.client.get_artist_albums(artist_id, limit=limit_per_artist),
                )
                for artist_id in ids
            )
        )

        seen: set[str] = set()
        merged: list[CatalogAlbum] = []
        for albums in results:
            for album in albums:
                if album.id in seen:
                    continue
                seen.add(album.id)
                merged.append(album)

        # sorted() is stable, so equal dates keep their merge order
        return sorted(merged, key=lambda album: album.release_sort_key, reverse=True)

    async def get_artist_top_tracks_fanout(
        self, artist_ids: list[str], per_artist_limit: int = 4
    ) -> list[CatalogTrack]:
        """Top tracks of the first few artists, concatenated in artist order."""
        ids = [artist_id for artist_id in artist_ids if artist_id][
            : self.settings.top_tracks_fanout_artists
        ]
        if not ids:
            return []

        async def _top_for(artist_id: str) -> list[CatalogTrack]:
            tracks = await self.client.get_artist_top_tracks(artist_id)
            return tracks[:per_artist_limit]

        results = await asyncio.gather(
            *(
                self._degrade(f"artist_top_tracks({artist_id})", _top_for(artist_id))
                for artist_id in ids
            )
        )
        return [track for tracks in results for track in tracks]

    # ─────────────────────────────────────────────────────────────────────────
    # RECOMMENDATIONS (never raise)
    # ─────────────────────────────────────────────────────────────────────────

    async def _try_recommendations(
        self,
        limit: int,
        seed_artists: list[str] | None = None,
        seed_genres: list[str] | None = None,
    ) -> list[CatalogTrack]:
        return await self._degrade(
            "recommendations",
            self.client.get_recommendations(
                seed_artists=seed_artists, seed_genres=seed_genres, limit=limit
            ),
        )

    async def get_recommendations_by_artists(
        self, artist_ids: list[str], limit: int = 20
    ) -> list[CatalogTrack]:
        """Recommendations seeded by artists.

        Fallback chain: recommendations → search over the seed artists' names →
        generic top tracks.
        """
        seeds = [artist_id for artist_id in artist_ids if artist_id][:MAX_RECOMMENDATION_SEEDS]
        if not seeds:
            return await self.get_top_tracks(limit)

        tracks = await self._try_recommendations(limit, seed_artists=seeds)
        if tracks:
            return tracks

        logger.info("CatalogService: artist recommendations empty, falling back to search")
        artists = await self.get_several_artists(seeds)
        names = [artist.name for artist in artists if artist.name]
        if names:
            query = " OR ".join(f'artist:"{name}"' for name in names)
            tracks = await self._degrade(
                "recommendations_search", self._search_tracks_raw(query, limit)
            )
            if tracks:
                return tracks

        logger.info("CatalogService: artist search fallback empty, using top tracks")
        return await self.get_top_tracks(limit)

    async def get_recommendations_by_genre(
        self, genre: str, limit: int = 20
    ) -> list[CatalogTrack]:
        """Recommendations seeded by one genre.

        Fallback chain: recommendations → genre:"<genre>" search → top tracks.
        """
        if not genre or not genre.strip():
            return await self.get_top_tracks(limit)

        seed = normalize_genre(genre)
        tracks = await self._try_recommendations(limit, seed_genres=[seed])
        if tracks:
            return tracks

        logger.info(f"CatalogService: genre recommendations empty for {seed!r}, using search")
        tracks = await self._degrade(
            "genre_search", self._search_tracks_raw(f'genre:"{genre.strip()}"', limit)
        )
        if tracks:
            return tracks

        return await self.get_top_tracks(limit)

    async def get_recommendations_by_user_genres(
        self, genres: list[str], limit: int = 20
    ) -> list[CatalogTrack]:
        """Recommendations seeded by several genres (up to five)."""
        cleaned = [genre for genre in genres if genre and genre.strip()]
        if not cleaned:
            return await self.get_top_tracks(limit)

        seeds = list(dict.fromkeys(normalize_genre(genre) for genre in cleaned))
        seeds = seeds[:MAX_RECOMMENDATION_SEEDS]
        tracks = await self._try_recommendations(limit, seed_genres=seeds)
        if tracks:
            return tracks
        return await self.get_recommendations_by_genre(cleaned[0], limit)

    async def _search_tracks_raw(self, query: str, limit: int) -> list[CatalogTrack]:
        response = await self.client.search(query, "track", limit)
        return response.tracks.items if response.tracks else []


def _items_for(
    response: SearchResponse, kind: str
) -> list[CatalogTrack] | list[CatalogAlbum] | list[CatalogArtist]:
    if kind == "track":
        return response.tracks.items if response.tracks else []
    if kind == "album":
        return response.albums.items if response.albums else []
    return response.artists.items if response.artists else []


def _require_id(value: str, name: str) -> None:
    if not value or not value.strip():
        raise ValidationError(f"{name} cannot be empty")


__all__ = ["GENRE_SEED_MAP", "CatalogService", "SearchResults", "normalize_genre"]
