"""Catalog data transfer objects.

Hey future me - these are the PARSED shapes of Spotify catalog responses. The HTTP
client validates every payload into one of these before anything else touches it, so
a malformed upstream answer becomes an UpstreamUnavailableError at the boundary instead
of a KeyError three layers down. They are read-only projections: nothing here is ever
persisted, every request re-fetches.

Optional upstream fields (followers, popularity, genres) are explicit Optionals or
empty-list defaults. Consumers must handle the None case themselves.
"""

from datetime import date
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class CatalogModel(BaseModel):
    """Base for all catalog projections: unknown upstream fields are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)


class CatalogImage(CatalogModel):
    url: str
    height: int | None = None
    width: int | None = None


def best_image_url(images: list[CatalogImage]) -> str | None:
    """Return the widest image URL, or None when there are no images."""
    if not images:
        return None
    return max(images, key=lambda image: image.width or 0).url


class Followers(CatalogModel):
    total: int | None = None


class CatalogArtistRef(CatalogModel):
    """Artist reference embedded in albums and tracks."""

    id: str
    name: str


class CatalogArtist(CatalogModel):
    id: str
    name: str
    images: list[CatalogImage] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    followers: Followers | None = None
    popularity: int | None = None
    external_urls: dict[str, str] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def follower_count(self) -> int | None:
        return self.followers.total if self.followers else None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def external_url(self) -> str | None:
        return self.external_urls.get("spotify")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def image_url(self) -> str | None:
        return best_image_url(self.images)


class CatalogAlbumRef(CatalogModel):
    """Partial album embedded in a track."""

    id: str
    name: str
    images: list[CatalogImage] = Field(default_factory=list)
    release_date: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def image_url(self) -> str | None:
        return best_image_url(self.images)


def parse_release_date(value: str | None) -> date:
    """Parse YYYY, YYYY-MM or YYYY-MM-DD; anything else sorts as date.min."""
    if not value:
        return date.min
    parts = value.split("-")
    try:
        year = int(parts[0])
        month = int(parts[1]) if len(parts) > 1 else 1
        day = int(parts[2]) if len(parts) > 2 else 1
        return date(year, month, day)
    except (ValueError, IndexError):
        return date.min


class CatalogAlbum(CatalogModel):
    id: str
    name: str
    artists: list[CatalogArtistRef] = Field(default_factory=list)
    images: list[CatalogImage] = Field(default_factory=list)
    release_date: str | None = None
    release_date_precision: str | None = None
    total_tracks: int | None = None
    album_type: str | None = None
    external_urls: dict[str, str] = Field(default_factory=dict)
    # Only the album detail read carries the tracklist (simplified tracks, no album)
    tracks: "Page[CatalogTrack] | None" = None

    @property
    def release_sort_key(self) -> date:
        return parse_release_date(self.release_date)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def external_url(self) -> str | None:
        return self.external_urls.get("spotify")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def image_url(self) -> str | None:
        return best_image_url(self.images)


class CatalogTrack(CatalogModel):
    id: str
    name: str
    artists: list[CatalogArtistRef] = Field(default_factory=list)
    album: CatalogAlbumRef | None = None
    duration_ms: int | None = None
    popularity: int | None = None
    preview_url: str | None = None
    external_urls: dict[str, str] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def external_url(self) -> str | None:
        return self.external_urls.get("spotify")


T = TypeVar("T", bound=CatalogModel)


def _drop_nulls(value: Any) -> Any:
    # Spotify puts null in result arrays for unavailable/removed items
    if isinstance(value, list):
        return [item for item in value if item is not None]
    return value


class Page(CatalogModel, Generic[T]):
    """Paging envelope (search results, artist albums, new releases)."""

    items: list[T] = Field(default_factory=list)
    total: int | None = None
    next: str | None = None

    @field_validator("items", mode="before")
    @classmethod
    def _filter_items(cls, value: Any) -> Any:
        return _drop_nulls(value)


CatalogAlbum.model_rebuild()


class SearchResponse(CatalogModel):
    tracks: Page[CatalogTrack] | None = None
    albums: Page[CatalogAlbum] | None = None
    artists: Page[CatalogArtist] | None = None


class TrackList(CatalogModel):
    """Bare track array (top tracks, recommendations)."""

    tracks: list[CatalogTrack] = Field(default_factory=list)

    @field_validator("tracks", mode="before")
    @classmethod
    def _filter_tracks(cls, value: Any) -> Any:
        return _drop_nulls(value)


class ArtistList(CatalogModel):
    """Bare artist array (several artists, related artists)."""

    artists: list[CatalogArtist] = Field(default_factory=list)

    @field_validator("artists", mode="before")
    @classmethod
    def _filter_artists(cls, value: Any) -> Any:
        return _drop_nulls(value)


class NewReleasesResponse(CatalogModel):
    albums: Page[CatalogAlbum] = Field(default_factory=Page[CatalogAlbum])


class GenreSeeds(CatalogModel):
    genres: list[str] = Field(default_factory=list)


class TokenResponse(BaseModel):
    """Client-credentials grant response."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(..., min_length=1)
    expires_in: int = Field(..., gt=0)
    token_type: str | None = None


__all__ = [
    "ArtistList",
    "CatalogAlbum",
    "CatalogAlbumRef",
    "CatalogArtist",
    "CatalogArtistRef",
    "CatalogImage",
    "CatalogModel",
    "CatalogTrack",
    "Followers",
    "GenreSeeds",
    "NewReleasesResponse",
    "Page",
    "SearchResponse",
    "TokenResponse",
    "TrackList",
    "best_image_url",
    "parse_release_date",
]
