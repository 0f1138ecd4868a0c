"""Spotify catalog HTTP client (client-credentials, read-only)."""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from soundrate.config.settings import CatalogSettings
from soundrate.domain.dtos import (
    ArtistList,
    CatalogAlbum,
    CatalogArtist,
    CatalogTrack,
    GenreSeeds,
    NewReleasesResponse,
    Page,
    SearchResponse,
    TrackList,
)
from soundrate.domain.exceptions import (
    RateLimitExceededError,
    UpstreamUnavailableError,
    ValidationError,
)
from soundrate.domain.ports import ICatalogClient, ITokenProvider
from soundrate.infrastructure.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

SEARCH_KINDS = ("track", "album", "artist")
MAX_SEED_VALUES = 5  # Spotify rejects more than 5 seeds in total


class SpotifyClient(ICatalogClient):
    """Bearer-authorized reader for the Spotify Web API catalog endpoints."""

    # Hey future me, like every client in here the httpx client is created lazily in
    # _get_client() so construction works outside a running event loop. The token
    # provider is injected: the client never caches credentials itself.
    def __init__(
        self,
        settings: CatalogSettings,
        token_provider: ITokenProvider,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """
        Initialize Spotify client.

        Args:
            settings: Catalog configuration settings
            token_provider: Source of the app bearer token
            http_client: Optional preconfigured client (tests)
            rate_limiter: Optional limiter, defaults to RateLimiter.for_catalog()
        """
        self.settings = settings
        self._token_provider = token_provider
        self._client = http_client
        self._owns_client = http_client is None
        self._rate_limiter = rate_limiter or RateLimiter.for_catalog()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.request_timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    # Hey future me - EVERY catalog read goes through here. It handles:
    # - token bucket rate limiting plus Retry-After aware retries on 429
    # - one token refresh and retry when Spotify says 401 (token revoked early)
    # - mapping every other failure (non-2xx, timeout, transport) to
    #   UpstreamUnavailableError so services only have to know one exception type
    async def _api_request(
        self, path: str, params: dict[str, Any] | None = None
    ) -> Any:
        """Issue an authorized GET and return the decoded JSON body.

        Raises:
            CatalogAuthError: If the token exchange fails
            RateLimitExceededError: If Spotify keeps answering 429
            UpstreamUnavailableError: On any other failed read
        """
        client = await self._get_client()
        url = f"{self.settings.api_base_url}{path}"
        max_retries = self.settings.max_retries
        refreshed = False
        attempt = 0
        waited = 0.0

        while True:
            token = await self._token_provider.get_token()
            try:
                async with self._rate_limiter:
                    response = await client.get(
                        url,
                        params=params,
                        headers={"Authorization": f"Bearer {token.value}"},
                    )
            except httpx.TimeoutException as e:
                logger.warning("Spotify request timed out: %s", path)
                raise UpstreamUnavailableError(
                    f"Spotify request timed out: {path}", path=path
                ) from e
            except httpx.HTTPError as e:
                logger.warning("Spotify request failed: %s (%s)", path, e)
                raise UpstreamUnavailableError(
                    f"Spotify request failed: {path}: {e}", path=path
                ) from e

            if response.status_code == 429:
                retry_after_str = response.headers.get("Retry-After")
                retry_after = (
                    int(retry_after_str)
                    if retry_after_str and retry_after_str.isdigit()
                    else None
                )
                if attempt >= max_retries:
                    logger.error(
                        "Spotify API rate limited (429) after %d retries: %s", max_retries, path
                    )
                    raise RateLimitExceededError(
                        f"Spotify API rate limited after {max_retries} retries",
                        retry_after=retry_after,
                    )
                # Back-off shares the per-call budget: a Retry-After we cannot honor
                # within request_timeout fails now instead of parking a fan-out branch.
                remaining = self.settings.request_timeout - waited
                if retry_after is not None and retry_after > remaining:
                    logger.warning(
                        "Spotify asked to wait %ds for %s, over the %.1fs budget",
                        retry_after,
                        path,
                        remaining,
                    )
                    raise RateLimitExceededError(
                        f"Spotify API rate limited, retry after {retry_after}s",
                        retry_after=retry_after,
                    )
                attempt += 1
                wait_time = await self._rate_limiter.handle_rate_limit_response(
                    retry_after, max_wait=remaining
                )
                waited += wait_time
                logger.warning(
                    "Spotify 429 (attempt %d/%d): waited %.1fs, retrying %s",
                    attempt,
                    max_retries,
                    wait_time,
                    path,
                )
                continue

            self._rate_limiter.reset_backoff()

            if response.status_code == 401 and not refreshed:
                logger.info("Spotify rejected the bearer token, refreshing once: %s", path)
                self._token_provider.invalidate()
                refreshed = True
                continue

            if not response.is_success:
                logger.warning("Spotify returned HTTP %s for %s", response.status_code, path)
                raise UpstreamUnavailableError(
                    f"Spotify returned HTTP {response.status_code} for {path}",
                    path=path,
                    http_status=response.status_code,
                )

            try:
                return response.json()
            except ValueError as e:
                raise UpstreamUnavailableError(
                    f"Spotify returned invalid JSON for {path}", path=path
                ) from e

    @staticmethod
    def _parse(model: type[ModelT], payload: Any, path: str) -> ModelT:
        """Validate a payload into its schema or fail as UpstreamUnavailableError."""
        try:
            return model.model_validate(payload)
        except PydanticValidationError as e:
            logger.warning(
                "Malformed Spotify payload for %s (%d errors)", path, e.error_count()
            )
            raise UpstreamUnavailableError(
                f"Malformed Spotify payload for {path}", path=path
            ) from e

    async def _get(
        self, model: type[ModelT], path: str, params: dict[str, Any] | None = None
    ) -> ModelT:
        payload = await self._api_request(path, params)
        return self._parse(model, payload, path)

    async def search(
        self, query: str, kind: str, limit: int = 20, market: str | None = None
    ) -> SearchResponse:
        """
        Search the catalog.

        Args:
            query: Free text, may contain field filters (genre:, year:)
            kind: One of track, album, artist (comma separated for several)
            limit: Results per kind (1-50)
            market: ISO country code, omitted when None

        Returns:
            SearchResponse with the requested pages populated
        """
        for part in kind.split(","):
            if part not in SEARCH_KINDS:
                raise ValidationError(
                    f"kind must be one of {', '.join(SEARCH_KINDS)}, got {part!r}"
                )
        params: dict[str, Any] = {"q": query, "type": kind, "limit": min(limit, 50)}
        if market:
            params["market"] = market
        return await self._get(SearchResponse, "/search", params)

    async def get_artist(self, artist_id: str) -> CatalogArtist:
        return await self._get(CatalogArtist, f"/artists/{artist_id}")

    # Yo future me, the plural /artists endpoint takes up to 50 comma-separated ids and
    # puts null where an id is unknown. ArtistList drops those nulls.
    async def get_several_artists(self, artist_ids: list[str]) -> list[CatalogArtist]:
        if not artist_ids:
            return []
        artists: list[CatalogArtist] = []
        for start in range(0, len(artist_ids), 50):
            chunk = artist_ids[start : start + 50]
            result = await self._get(ArtistList, "/artists", {"ids": ",".join(chunk)})
            artists.extend(result.artists)
        return artists

    async def get_artist_top_tracks(self, artist_id: str) -> list[CatalogTrack]:
        result = await self._get(
            TrackList,
            f"/artists/{artist_id}/top-tracks",
            {"market": self.settings.market},
        )
        return result.tracks

    async def get_artist_albums(
        self, artist_id: str, limit: int = 20, include_groups: str = "album,single"
    ) -> list[CatalogAlbum]:
        result = await self._get(
            Page[CatalogAlbum],
            f"/artists/{artist_id}/albums",
            {
                "include_groups": include_groups,
                "limit": min(limit, 50),
                "market": self.settings.market,
            },
        )
        return result.items

    async def get_related_artists(self, artist_id: str) -> list[CatalogArtist]:
        result = await self._get(ArtistList, f"/artists/{artist_id}/related-artists")
        return result.artists

    async def get_album(self, album_id: str) -> CatalogAlbum:
        return await self._get(
            CatalogAlbum, f"/albums/{album_id}", {"market": self.settings.market}
        )

    async def get_track(self, track_id: str) -> CatalogTrack:
        return await self._get(
            CatalogTrack, f"/tracks/{track_id}", {"market": self.settings.market}
        )

    async def get_new_releases(self, limit: int = 20) -> list[CatalogAlbum]:
        result = await self._get(
            NewReleasesResponse,
            "/browse/new-releases",
            {"limit": min(limit, 50), "country": self.settings.market},
        )
        return result.albums.items

    async def get_recommendations(
        self,
        seed_artists: list[str] | None = None,
        seed_genres: list[str] | None = None,
        limit: int = 20,
    ) -> list[CatalogTrack]:
        """
        Get seed-based recommendations.

        Args:
            seed_artists: Artist ids (at most 5 seeds in total are sent)
            seed_genres: Genre seeds from get_available_genre_seeds()
            limit: Number of tracks (1-100)

        Returns:
            Recommended tracks in upstream order
        """
        artists = list(seed_artists or [])[:MAX_SEED_VALUES]
        genres = list(seed_genres or [])[: MAX_SEED_VALUES - len(artists)]
        if not artists and not genres:
            raise ValidationError("recommendations need at least one seed artist or genre")

        params: dict[str, Any] = {"limit": min(limit, 100), "market": self.settings.market}
        if artists:
            params["seed_artists"] = ",".join(artists)
        if genres:
            params["seed_genres"] = ",".join(genres)
        result = await self._get(TrackList, "/recommendations", params)
        return result.tracks

    async def get_available_genre_seeds(self) -> list[str]:
        result = await self._get(GenreSeeds, "/recommendations/available-genre-seeds")
        return result.genres

    async def __aenter__(self) -> "SpotifyClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()


__all__ = ["SpotifyClient"]
