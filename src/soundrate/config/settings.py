"""Application settings loaded from environment variables and .env."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogSettings(BaseSettings):
    """Spotify catalog (client-credentials) configuration.

    Read from SPOTIFY_* environment variables, e.g. SPOTIFY_CLIENT_ID.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPOTIFY_", env_file=".env", extra="ignore"
    )

    client_id: str = ""
    client_secret: str = ""
    token_url: str = "https://accounts.spotify.com/api/token"  # nosec B105 - endpoint URL, not a password
    api_base_url: str = "https://api.spotify.com/v1"
    market: str = "US"

    # Hey future me - this is the per-call bound for EVERY catalog request (token
    # exchange included). A fan-out branch that hangs longer than this resolves to
    # an empty contribution instead of stalling the whole aggregate read.
    request_timeout: float = Field(10.0, gt=0)
    token_expiry_margin: int = Field(300, ge=0)
    max_retries: int = Field(3, ge=0)

    max_fanout_artists: int = Field(5, ge=1)
    top_tracks_fanout_artists: int = Field(3, ge=1)
    # Placeholder "trending" query: the catalog has no trending endpoint for
    # client-credentials apps, so top tracks are a popularity-sorted search.
    top_tracks_query: str = "year:2024-2025"

    @property
    def is_configured(self) -> bool:
        """Check whether client credentials are present."""
        return bool(self.client_id.strip() and self.client_secret.strip())


class DatabaseSettings(BaseSettings):
    """Datastore connection settings (DATABASE_* variables)."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_", env_file=".env", extra="ignore"
    )

    url: str = "sqlite+aiosqlite:///./soundrate.db"
    echo: bool = False
    pool_pre_ping: bool = True
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    create_tables_on_startup: bool = True


class ObservabilitySettings(BaseSettings):
    """Logging settings (OBSERVABILITY_* variables)."""

    model_config = SettingsConfigDict(
        env_prefix="OBSERVABILITY_", env_file=".env", extra="ignore"
    )

    log_json_format: bool = False


class ApiSettings(BaseSettings):
    """HTTP server settings (API_* variables)."""

    model_config = SettingsConfigDict(
        env_prefix="API_", env_file=".env", extra="ignore"
    )

    host: str = "127.0.0.1"
    port: int = 8000
    # Set by the auth proxy in front of us after it validated the session cookie.
    user_id_header: str = "X-User-Id"


class Settings(BaseSettings):
    """Top-level application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "soundrate"
    log_level: str = "INFO"

    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    api: ApiSettings = Field(default_factory=ApiSettings)


# Hey future me - cached so the whole process shares ONE settings object. Tests that
# need different values should build Settings(...) directly instead of patching env.
@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
