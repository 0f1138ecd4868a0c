"""External service integrations."""

from soundrate.infrastructure.integrations.spotify_client import SpotifyClient
from soundrate.infrastructure.integrations.token_cache import (
    ClientCredentialsTokenCache,
    TokenCacheState,
)

__all__ = ["ClientCredentialsTokenCache", "SpotifyClient", "TokenCacheState"]
