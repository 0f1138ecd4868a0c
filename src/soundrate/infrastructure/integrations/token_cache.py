"""Process-wide client-credentials token cache for the Spotify catalog."""

import asyncio
import base64
import logging
import time
from collections.abc import Callable
from enum import Enum

import httpx
from pydantic import ValidationError as PydanticValidationError

from soundrate.config.settings import CatalogSettings
from soundrate.domain.dtos import TokenResponse
from soundrate.domain.entities import AccessToken
from soundrate.domain.exceptions import CatalogAuthError, ConfigurationError
from soundrate.domain.ports import ITokenProvider

logger = logging.getLogger(__name__)


class TokenCacheState(str, Enum):
    """Observable lifecycle of the cached credential."""

    UNINITIALIZED = "uninitialized"
    VALID = "valid"
    EXPIRED = "expired"
    REFRESHING = "refreshing"


class ClientCredentialsTokenCache(ITokenProvider):
    """Single cached bearer token, refreshed on demand.

    Hey future me - there is exactly ONE of these per process (built in the app
    lifespan, handed to the SpotifyClient). The credential belongs to the app, not
    to a user, so there's no per-user partitioning. Refresh is single-flight: the
    lock plus the re-check after acquiring means N concurrent callers that all see
    a stale token cause ONE exchange, the other N-1 just pick up the new token.
    """

    def __init__(
        self,
        settings: CatalogSettings,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the token cache.

        Args:
            settings: Catalog configuration (credentials, token URL, margin)
            http_client: Optional shared client; created lazily when omitted
            clock: Epoch-seconds clock, injectable for tests
        """
        self.settings = settings
        self._client = http_client
        self._owns_client = http_client is None
        self._clock = clock
        self._token: AccessToken | None = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.settings.request_timeout)
        return self._client

    @property
    def state(self) -> TokenCacheState:
        if self._lock.locked():
            return TokenCacheState.REFRESHING
        if self._token is None:
            return TokenCacheState.UNINITIALIZED
        if self._token.is_valid(self._clock()):
            return TokenCacheState.VALID
        return TokenCacheState.EXPIRED

    async def get_token(self) -> AccessToken:
        """Return a token valid right now, exchanging credentials if needed.

        Raises:
            ConfigurationError: If client id/secret are not configured
            CatalogAuthError: If the credential exchange fails
        """
        token = self._token
        if token is not None and token.is_valid(self._clock()):
            return token

        async with self._lock:
            # Another caller may have refreshed while we waited for the lock
            token = self._token
            if token is not None and token.is_valid(self._clock()):
                return token

            token = await self._exchange()
            self._token = token
            return token

    def invalidate(self) -> None:
        """Drop the cached token (the catalog rejected it with 401)."""
        if self._token is not None:
            logger.info("Catalog token invalidated, next request will refresh it")
        self._token = None

    async def _exchange(self) -> AccessToken:
        if not self.settings.is_configured:
            raise ConfigurationError(
                "Spotify client credentials are not configured "
                "(set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET)"
            )

        credentials = f"{self.settings.client_id}:{self.settings.client_secret}"
        encoded = base64.b64encode(credentials.encode()).decode()
        client = await self._get_client()

        try:
            response = await client.post(
                self.settings.token_url,
                data={"grant_type": "client_credentials"},
                headers={
                    "Authorization": f"Basic {encoded}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
            )
        except httpx.HTTPError as e:
            logger.warning("Catalog token exchange failed: %s", e)
            raise CatalogAuthError(f"Token exchange failed: {e}") from e

        if not response.is_success:
            logger.warning(
                "Catalog token exchange rejected with HTTP %s", response.status_code
            )
            raise CatalogAuthError(
                f"Token exchange rejected with HTTP {response.status_code}",
                http_status=response.status_code,
            )

        try:
            payload = TokenResponse.model_validate_json(response.content)
        except PydanticValidationError as e:
            raise CatalogAuthError(
                "Token endpoint returned a malformed payload",
                http_status=response.status_code,
            ) from e

        # Hey future me - a lifetime shorter than the margin would produce a token that
        # is already expired on arrival, so the margin is capped at half the lifetime.
        margin = min(self.settings.token_expiry_margin, payload.expires_in // 2)
        now = self._clock()
        logger.debug("Catalog token refreshed, valid for %ss", payload.expires_in - margin)
        return AccessToken(
            value=payload.access_token,
            expires_at=now + (payload.expires_in - margin),
        )

    async def close(self) -> None:
        """Close the HTTP client if this cache created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None


__all__ = ["ClientCredentialsTokenCache", "TokenCacheState"]
