"""SQLAlchemy ORM models for SoundRate."""

from datetime import UTC, datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import JSON, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


# Hey future me - SQLite doesn't preserve timezone info! UTC datetimes come back "naive".
# Run every datetime read from the DB through this before comparing or serializing.
def ensure_utc_aware(dt: datetime) -> datetime:
    """Ensure datetime is UTC-aware, assuming naive datetimes are UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Hey future me, user ids here are opaque strings handed to us by the auth provider.
# There are deliberately NO foreign keys from ratings/follows to user_profiles: a rating
# may outlive its profile row, and the feed shows "Unknown User" for those.
class RatingModel(Base):
    """One user's rating of one catalog item."""

    __tablename__ = "music_ratings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    item_id: Mapped[str] = mapped_column(String(64), nullable=False)
    item_type: Mapped[str] = mapped_column(String(16), nullable=False)
    item_name: Mapped[str] = mapped_column(String(512), nullable=False)
    item_image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    item_artists: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    review: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        sa.UniqueConstraint("user_id", "item_id", name="uq_music_ratings_user_item"),
        Index("ix_music_ratings_item", "item_id", "item_type"),
        Index("ix_music_ratings_created_at", "created_at"),
    )


class ProfileModel(Base):
    """Public profile of a user."""

    __tablename__ = "user_profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (Index("ix_user_profiles_username_lower", sa.func.lower(username)),)


class FollowModel(Base):
    """Directed follower → following edge."""

    __tablename__ = "user_follows"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    follower_id: Mapped[str] = mapped_column(String(64), nullable=False)
    following_id: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        sa.UniqueConstraint("follower_id", "following_id", name="uq_user_follows_pair"),
        Index("ix_user_follows_following", "following_id"),
    )


class FavoriteModel(Base):
    """One slot on a user's favorites shelf."""

    __tablename__ = "user_favorites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    favorite_type: Mapped[str] = mapped_column(String(16), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    item_id: Mapped[str] = mapped_column(String(64), nullable=False)
    item_name: Mapped[str] = mapped_column(String(512), nullable=False)
    item_image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    item_artists: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        sa.UniqueConstraint(
            "user_id", "favorite_type", "position", name="uq_user_favorites_slot"
        ),
        sa.CheckConstraint("position BETWEEN 1 AND 5", name="ck_user_favorites_position"),
    )


class PreferencesModel(Base):
    """Per-user preferences; favorite_artists is a JSON list of {id, name, image}."""

    __tablename__ = "user_preferences"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    favorite_artists: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )


__all__ = [
    "Base",
    "FavoriteModel",
    "FollowModel",
    "PreferencesModel",
    "ProfileModel",
    "RatingModel",
    "ensure_utc_aware",
    "utc_now",
]
