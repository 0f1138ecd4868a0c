"""Domain entities."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from soundrate.domain.exceptions import ValidationError

MIN_RATING = 0.5
MAX_RATING = 5.0
RATING_STEP = 0.5
MAX_REVIEW_LENGTH = 500
MIN_FAVORITE_POSITION = 1
MAX_FAVORITE_POSITION = 5
MIN_ONBOARDING_ARTISTS = 3
MAX_ONBOARDING_ARTISTS = 10
UNKNOWN_USERNAME = "Unknown User"


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


class ItemType(str, Enum):
    """Kind of catalog item a rating refers to."""

    TRACK = "track"
    ALBUM = "album"
    ARTIST = "artist"


class FavoriteType(str, Enum):
    """Slot group on a profile's favorites shelf."""

    ARTIST = "artist"
    ALBUM = "album"
    TRACK = "track"


# Hey future me - the catalog credential is a SERVICE credential, not a user one. One
# AccessToken lives per process and is replaced wholesale on expiry, never mutated.
@dataclass(frozen=True)
class AccessToken:
    """Bearer credential for the catalog API."""

    value: str
    expires_at: float  # epoch seconds, already shortened by the safety margin

    def is_valid(self, now: float) -> bool:
        """Return True while the token may still be handed out."""
        return now < self.expires_at


def validate_score(rating: float) -> float:
    """Check a star score: 0.5..5 in half steps."""
    try:
        value = float(rating)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"rating must be a number, got {rating!r}") from e
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError(
            f"rating must be between {MIN_RATING} and {MAX_RATING}, got {value}"
        )
    if (value / RATING_STEP) != int(value / RATING_STEP):
        raise ValidationError(f"rating must be a multiple of {RATING_STEP}, got {value}")
    return value


def validate_review(review: str | None) -> str | None:
    """Check review text length."""
    if review is not None and len(review) > MAX_REVIEW_LENGTH:
        raise ValidationError(
            f"review must be at most {MAX_REVIEW_LENGTH} characters, got {len(review)}"
        )
    return review


@dataclass
class Rating:
    """A user's star rating (and optional review) of one catalog item.

    At most one Rating exists per (user_id, item_id); re-rating updates it.
    """

    user_id: str
    item_id: str
    item_type: ItemType
    item_name: str
    rating: float
    item_image: str | None = None
    item_artists: str | None = None
    review: str | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def has_review(self) -> bool:
        return bool(self.review and self.review.strip())


@dataclass
class RatingInput:
    """Write-side command for creating or updating a rating.

    artist_id/artist_name identify the primary artist of a rated track; they feed
    the auto-favorite hook and are not stored on the rating itself.
    """

    item_id: str
    item_type: ItemType | str
    item_name: str
    rating: float
    item_image: str | None = None
    item_artists: str | None = None
    review: str | None = None
    artist_id: str | None = None
    artist_name: str | None = None

    def validate(self) -> None:
        """Raise ValidationError on missing or malformed fields."""
        missing = [
            name
            for name, value in (
                ("item_id", self.item_id),
                ("item_type", self.item_type),
                ("item_name", self.item_name),
            )
            if value is None or not str(value).strip()
        ]
        if self.rating is None:
            missing.append("rating")
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        try:
            self.item_type = ItemType(self.item_type)
        except ValueError as e:
            allowed = ", ".join(t.value for t in ItemType)
            raise ValidationError(
                f"item_type must be one of {allowed}, got {self.item_type!r}"
            ) from e
        self.rating = validate_score(self.rating)
        self.review = validate_review(self.review)

    def to_rating(self, user_id: str) -> Rating:
        return Rating(
            user_id=user_id,
            item_id=self.item_id,
            item_type=ItemType(self.item_type),
            item_name=self.item_name,
            rating=self.rating,
            item_image=self.item_image or None,
            item_artists=self.item_artists or None,
            review=self.review or "",
        )


@dataclass
class RatingSummary:
    """Aggregate of all ratings for one item."""

    item_id: str
    average: float = 0.0
    count: int = 0


@dataclass
class Profile:
    """Public user profile."""

    id: str
    username: str
    avatar_url: str | None = None
    bio: str | None = None

    def __post_init__(self) -> None:
        if not self.username or not self.username.strip():
            raise ValidationError("username cannot be empty")


@dataclass(frozen=True)
class ProfileSummary:
    """Profile fields embedded next to a rating in feeds."""

    username: str
    avatar_url: str | None = None
    id: str | None = None

    @classmethod
    def placeholder(cls) -> "ProfileSummary":
        # Soft-deleted or not-yet-created profile rows
        return cls(username=UNKNOWN_USERNAME, avatar_url=None)

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileSummary":
        return cls(username=profile.username, avatar_url=profile.avatar_url, id=profile.id)


@dataclass
class RatingWithProfile:
    """Rating joined with its author's profile."""

    rating: Rating
    profile: ProfileSummary


@dataclass
class FavoriteArtistRef:
    """An artist the user picked (onboarding) or rated highly."""

    id: str
    name: str
    image_url: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {"id": self.id, "name": self.name, "image": self.image_url}

    @classmethod
    def from_dict(cls, data: dict[str, str | None]) -> "FavoriteArtistRef":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            image_url=data.get("image"),
        )


@dataclass
class UserPreferences:
    """Per-user taste profile used to seed catalog fan-out."""

    user_id: str
    favorite_artists: list[FavoriteArtistRef] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @property
    def artist_ids(self) -> list[str]:
        return [artist.id for artist in self.favorite_artists]

    def has_artist(self, artist_id: str) -> bool:
        return any(artist.id == artist_id for artist in self.favorite_artists)

    def add_artist(self, artist: FavoriteArtistRef) -> bool:
        """Append an artist unless already present. Returns True if added."""
        if self.has_artist(artist.id):
            return False
        self.favorite_artists.append(artist)
        self.updated_at = utc_now()
        return True


@dataclass
class Favorite:
    """One slot (position 1..5) on a profile's favorites shelf."""

    user_id: str
    favorite_type: FavoriteType
    position: int
    item_id: str
    item_name: str
    item_image: str | None = None
    item_artists: str | None = None

    def __post_init__(self) -> None:
        if not MIN_FAVORITE_POSITION <= self.position <= MAX_FAVORITE_POSITION:
            raise ValidationError(
                f"position must be between {MIN_FAVORITE_POSITION} and "
                f"{MAX_FAVORITE_POSITION}, got {self.position}"
            )
        if not self.item_id or not self.item_name:
            raise ValidationError("favorite needs item_id and item_name")


@dataclass
class FollowStats:
    """Follower/following counts as seen by a viewer."""

    follower_count: int = 0
    following_count: int = 0
    is_following: bool = False


__all__ = [
    "MAX_FAVORITE_POSITION",
    "MAX_ONBOARDING_ARTISTS",
    "MAX_RATING",
    "MAX_REVIEW_LENGTH",
    "MIN_FAVORITE_POSITION",
    "MIN_ONBOARDING_ARTISTS",
    "MIN_RATING",
    "UNKNOWN_USERNAME",
    "AccessToken",
    "Favorite",
    "FavoriteArtistRef",
    "FavoriteType",
    "FollowStats",
    "ItemType",
    "Profile",
    "ProfileSummary",
    "Rating",
    "RatingInput",
    "RatingSummary",
    "RatingWithProfile",
    "UserPreferences",
    "utc_now",
    "validate_review",
    "validate_score",
]
