"""Configuration module for SoundRate."""

from .settings import (
    ApiSettings,
    CatalogSettings,
    DatabaseSettings,
    ObservabilitySettings,
    Settings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "CatalogSettings",
    "DatabaseSettings",
    "ObservabilitySettings",
    "Settings",
    "get_settings",
]
