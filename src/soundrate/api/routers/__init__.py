"""API router initialization."""

# Hey future me, this is the MAIN API router aggregator. It gets mounted at /api in main.py,
# so the catalog router's "/catalog" prefix becomes /api/catalog/... The health router is NOT
# in here: probes hit /health at the root.

from fastapi import APIRouter

from soundrate.api.routers import catalog, favorites, health, home, ratings, reviews, social

api_router = APIRouter()

api_router.include_router(catalog.router)
api_router.include_router(home.router)
api_router.include_router(ratings.router)
api_router.include_router(reviews.router)
api_router.include_router(social.router)
api_router.include_router(favorites.router)

__all__ = ["api_router", "health"]
