"""Infrastructure persistence layer."""

from .database import Database
from .models import (
    Base,
    FavoriteModel,
    FollowModel,
    PreferencesModel,
    ProfileModel,
    RatingModel,
)
from .repositories import (
    FavoriteRepository,
    FollowRepository,
    PreferencesRepository,
    ProfileRepository,
    RatingRepository,
)

__all__ = [
    "Base",
    "Database",
    "FavoriteModel",
    "FavoriteRepository",
    "FollowModel",
    "FollowRepository",
    "PreferencesModel",
    "PreferencesRepository",
    "ProfileModel",
    "ProfileRepository",
    "RatingModel",
    "RatingRepository",
]
