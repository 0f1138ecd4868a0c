"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod

from soundrate.domain.dtos import (
    CatalogAlbum,
    CatalogArtist,
    CatalogTrack,
    SearchResponse,
)
from soundrate.domain.entities import (
    AccessToken,
    Favorite,
    FavoriteArtistRef,
    FavoriteType,
    ItemType,
    Profile,
    Rating,
    RatingSummary,
    UserPreferences,
)


class ITokenProvider(ABC):
    """Port for the process-wide catalog credential."""

    @abstractmethod
    async def get_token(self) -> AccessToken:
        """Return a token that is valid right now.

        Raises:
            CatalogAuthError: If the credential exchange fails
        """
        pass

    @abstractmethod
    def invalidate(self) -> None:
        """Drop the cached token so the next get_token() exchanges again."""
        pass


class ICatalogClient(ABC):
    """Port for bearer-authorized catalog reads.

    Every method raises UpstreamUnavailableError (or RateLimitExceededError /
    CatalogAuthError) on failure. Degrading to empty results is the caller's
    decision, not the client's.
    """

    @abstractmethod
    async def search(
        self, query: str, kind: str, limit: int = 20, market: str | None = None
    ) -> SearchResponse:
        pass

    @abstractmethod
    async def get_artist(self, artist_id: str) -> CatalogArtist:
        pass

    @abstractmethod
    async def get_several_artists(self, artist_ids: list[str]) -> list[CatalogArtist]:
        pass

    @abstractmethod
    async def get_artist_top_tracks(self, artist_id: str) -> list[CatalogTrack]:
        pass

    @abstractmethod
    async def get_artist_albums(
        self, artist_id: str, limit: int = 20, include_groups: str = "album,single"
    ) -> list[CatalogAlbum]:
        pass

    @abstractmethod
    async def get_related_artists(self, artist_id: str) -> list[CatalogArtist]:
        pass

    @abstractmethod
    async def get_album(self, album_id: str) -> CatalogAlbum:
        pass

    @abstractmethod
    async def get_track(self, track_id: str) -> CatalogTrack:
        pass

    @abstractmethod
    async def get_new_releases(self, limit: int = 20) -> list[CatalogAlbum]:
        pass

    @abstractmethod
    async def get_recommendations(
        self,
        seed_artists: list[str] | None = None,
        seed_genres: list[str] | None = None,
        limit: int = 20,
    ) -> list[CatalogTrack]:
        pass

    @abstractmethod
    async def get_available_genre_seeds(self) -> list[str]:
        pass


class IRatingRepository(ABC):
    """Port for the ratings store (unique per user_id + item_id)."""

    @abstractmethod
    async def upsert(self, rating: Rating) -> Rating:
        """Insert or update the (user_id, item_id) row and return the stored state."""
        pass

    @abstractmethod
    async def get(self, user_id: str, item_id: str) -> Rating | None:
        pass

    @abstractmethod
    async def list_by_user(
        self, user_id: str, item_type: ItemType | None = None, limit: int | None = None
    ) -> list[Rating]:
        pass

    @abstractmethod
    async def list_by_users(self, user_ids: list[str], limit: int = 50) -> list[Rating]:
        pass

    @abstractmethod
    async def list_by_item(
        self, item_id: str, item_type: ItemType | None = None
    ) -> list[Rating]:
        pass

    @abstractmethod
    async def list_recent(self, limit: int = 10) -> list[Rating]:
        pass

    @abstractmethod
    async def delete(self, user_id: str, item_id: str) -> bool:
        pass

    @abstractmethod
    async def summarize(self, item_id: str) -> RatingSummary:
        pass


class IProfileRepository(ABC):
    """Port for the profiles store."""

    @abstractmethod
    async def get(self, user_id: str) -> Profile | None:
        pass

    @abstractmethod
    async def get_by_ids(self, user_ids: list[str]) -> list[Profile]:
        pass

    @abstractmethod
    async def search_by_username(self, fragment: str, limit: int = 10) -> list[Profile]:
        pass

    @abstractmethod
    async def upsert(self, profile: Profile) -> Profile:
        pass


class IFollowRepository(ABC):
    """Port for the follows store (unique per follower/following pair)."""

    @abstractmethod
    async def add(self, follower_id: str, following_id: str) -> None:
        pass

    @abstractmethod
    async def remove(self, follower_id: str, following_id: str) -> bool:
        pass

    @abstractmethod
    async def exists(self, follower_id: str, following_id: str) -> bool:
        pass

    @abstractmethod
    async def count_followers(self, user_id: str) -> int:
        pass

    @abstractmethod
    async def count_following(self, user_id: str) -> int:
        pass

    @abstractmethod
    async def list_following_ids(self, follower_id: str) -> list[str]:
        pass


class IFavoriteRepository(ABC):
    """Port for the favorites shelf (unique per user, type, position)."""

    @abstractmethod
    async def upsert(self, favorite: Favorite) -> Favorite:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str) -> list[Favorite]:
        pass

    @abstractmethod
    async def delete(self, user_id: str, favorite_type: FavoriteType, position: int) -> bool:
        pass


class IPreferencesRepository(ABC):
    """Port for per-user preferences (favorite artist seeds)."""

    @abstractmethod
    async def get(self, user_id: str) -> UserPreferences | None:
        pass

    @abstractmethod
    async def save(self, preferences: UserPreferences) -> UserPreferences:
        pass

    @abstractmethod
    async def add_favorite_artist(self, user_id: str, artist: FavoriteArtistRef) -> bool:
        """Add an artist unless present, creating the preferences row if needed.

        Returns:
            True if the artist was added, False if it was already there
        """
        pass


__all__ = [
    "ICatalogClient",
    "IFavoriteRepository",
    "IFollowRepository",
    "IPreferencesRepository",
    "IProfileRepository",
    "IRatingRepository",
    "ITokenProvider",
]
