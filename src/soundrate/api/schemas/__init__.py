"""API request and response schemas shared by the routers."""

from datetime import datetime

from pydantic import BaseModel, Field

from soundrate.domain.entities import (
    MAX_REVIEW_LENGTH,
    Favorite,
    FavoriteArtistRef,
    FavoriteType,
    FollowStats,
    ItemType,
    Profile,
    Rating,
    RatingSummary,
    RatingWithProfile,
    UserPreferences,
)

# =============================================================================
# RATINGS
# =============================================================================


class RatingRequest(BaseModel):
    """Create or update the caller's rating of one item.

    Range and step of the score are checked by the domain layer so that every caller
    gets the same error message, not here.
    """

    item_id: str = Field(..., description="Catalog id of the rated item")
    item_type: ItemType = Field(..., description="track, album or artist")
    item_name: str = Field(..., description="Display name at rating time")
    rating: float = Field(..., description="0.5 to 5 in half steps")
    item_image: str | None = Field(None, description="Artwork URL")
    item_artists: str | None = Field(None, description="Comma separated artist names")
    review: str | None = Field(
        None, description=f"Optional review text (max {MAX_REVIEW_LENGTH} characters)"
    )
    artist_id: str | None = Field(None, description="Primary artist id of a rated track")
    artist_name: str | None = Field(None, description="Primary artist name of a rated track")


class RatingResponse(BaseModel):
    """A stored rating."""

    id: int | None = None
    user_id: str
    item_id: str
    item_type: ItemType
    item_name: str
    item_image: str | None = None
    item_artists: str | None = None
    rating: float
    review: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, rating: Rating) -> "RatingResponse":
        return cls(
            id=rating.id,
            user_id=rating.user_id,
            item_id=rating.item_id,
            item_type=rating.item_type,
            item_name=rating.item_name,
            item_image=rating.item_image,
            item_artists=rating.item_artists,
            rating=rating.rating,
            review=rating.review,
            created_at=rating.created_at,
            updated_at=rating.updated_at,
        )


class RatingSummaryResponse(BaseModel):
    item_id: str
    average: float = Field(..., description="Average score, 0.0 when unrated")
    count: int

    @classmethod
    def from_entity(cls, summary: RatingSummary) -> "RatingSummaryResponse":
        return cls(item_id=summary.item_id, average=summary.average, count=summary.count)


class ProfileSummaryResponse(BaseModel):
    id: str | None = None
    username: str
    avatar_url: str | None = None


class ReviewResponse(BaseModel):
    """A rating with its author's profile embedded."""

    rating: RatingResponse
    profile: ProfileSummaryResponse

    @classmethod
    def from_entity(cls, item: RatingWithProfile) -> "ReviewResponse":
        return cls(
            rating=RatingResponse.from_entity(item.rating),
            profile=ProfileSummaryResponse(
                id=item.profile.id,
                username=item.profile.username,
                avatar_url=item.profile.avatar_url,
            ),
        )


# =============================================================================
# SOCIAL
# =============================================================================


class ProfileResponse(BaseModel):
    id: str
    username: str
    avatar_url: str | None = None
    bio: str | None = None

    @classmethod
    def from_entity(cls, profile: Profile) -> "ProfileResponse":
        return cls(
            id=profile.id,
            username=profile.username,
            avatar_url=profile.avatar_url,
            bio=profile.bio,
        )


class ProfileUpdateRequest(BaseModel):
    """Fields left out (None) keep their current value."""

    username: str | None = Field(None, min_length=1, max_length=64)
    bio: str | None = Field(None, max_length=500)
    avatar_url: str | None = Field(None, description="URL of an already uploaded avatar")


class FollowRequest(BaseModel):
    following_id: str = Field(..., description="User to follow")


class FollowStatsResponse(BaseModel):
    user_id: str
    follower_count: int
    following_count: int
    is_following: bool = Field(False, description="Whether the caller follows this user")

    @classmethod
    def from_entity(cls, user_id: str, stats: FollowStats) -> "FollowStatsResponse":
        return cls(
            user_id=user_id,
            follower_count=stats.follower_count,
            following_count=stats.following_count,
            is_following=stats.is_following,
        )


# =============================================================================
# FAVORITES & PREFERENCES
# =============================================================================


class FavoriteRequest(BaseModel):
    favorite_type: FavoriteType
    position: int = Field(..., description="Slot 1..5")
    item_id: str
    item_name: str
    item_image: str | None = None
    item_artists: str | None = None


class FavoriteResponse(BaseModel):
    favorite_type: FavoriteType
    position: int
    item_id: str
    item_name: str
    item_image: str | None = None
    item_artists: str | None = None

    @classmethod
    def from_entity(cls, favorite: Favorite) -> "FavoriteResponse":
        return cls(
            favorite_type=favorite.favorite_type,
            position=favorite.position,
            item_id=favorite.item_id,
            item_name=favorite.item_name,
            item_image=favorite.item_image,
            item_artists=favorite.item_artists,
        )


class FavoritesResponse(BaseModel):
    user_id: str
    artists: list[FavoriteResponse] = Field(default_factory=list)
    albums: list[FavoriteResponse] = Field(default_factory=list)
    tracks: list[FavoriteResponse] = Field(default_factory=list)


class FavoriteArtistSchema(BaseModel):
    id: str
    name: str
    image_url: str | None = None

    def to_entity(self) -> FavoriteArtistRef:
        return FavoriteArtistRef(id=self.id, name=self.name, image_url=self.image_url)

    @classmethod
    def from_entity(cls, artist: FavoriteArtistRef) -> "FavoriteArtistSchema":
        return cls(id=artist.id, name=artist.name, image_url=artist.image_url)


class FavoriteArtistsRequest(BaseModel):
    artists: list[FavoriteArtistSchema] = Field(..., description="3 to 10 artists")


class PreferencesResponse(BaseModel):
    user_id: str
    favorite_artists: list[FavoriteArtistSchema] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, preferences: UserPreferences) -> "PreferencesResponse":
        return cls(
            user_id=preferences.user_id,
            favorite_artists=[
                FavoriteArtistSchema.from_entity(artist)
                for artist in preferences.favorite_artists
            ],
        )


__all__ = [
    "FavoriteArtistSchema",
    "FavoriteArtistsRequest",
    "FavoriteRequest",
    "FavoriteResponse",
    "FavoritesResponse",
    "FollowRequest",
    "FollowStatsResponse",
    "PreferencesResponse",
    "ProfileResponse",
    "ProfileSummaryResponse",
    "ProfileUpdateRequest",
    "RatingRequest",
    "RatingResponse",
    "RatingSummaryResponse",
    "ReviewResponse",
]
