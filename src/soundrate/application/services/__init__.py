"""Application services."""

from soundrate.application.services.catalog_service import CatalogService, SearchResults
from soundrate.application.services.discovery_service import DiscoveryService, HomeFeed
from soundrate.application.services.favorites_service import FavoritesService
from soundrate.application.services.feed_service import FeedService, stitch_profiles
from soundrate.application.services.rating_service import (
    AutoFavoriteArtistHook,
    RatingService,
)
from soundrate.application.services.social_service import SocialService

__all__ = [
    "AutoFavoriteArtistHook",
    "CatalogService",
    "DiscoveryService",
    "FavoritesService",
    "FeedService",
    "HomeFeed",
    "RatingService",
    "SearchResults",
    "SocialService",
    "stitch_profiles",
]
