"""Repository implementations for domain entities."""

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from soundrate.domain.entities import (
    Favorite,
    FavoriteArtistRef,
    FavoriteType,
    ItemType,
    Profile,
    Rating,
    RatingSummary,
    UserPreferences,
)
from soundrate.domain.exceptions import DuplicateEntityException
from soundrate.domain.ports import (
    IFavoriteRepository,
    IFollowRepository,
    IPreferencesRepository,
    IProfileRepository,
    IRatingRepository,
)

from .models import (
    FavoriteModel,
    FollowModel,
    PreferencesModel,
    ProfileModel,
    RatingModel,
    ensure_utc_aware,
    utc_now,
)


def _rating_from_model(model: RatingModel) -> Rating:
    return Rating(
        id=model.id,
        user_id=model.user_id,
        item_id=model.item_id,
        item_type=ItemType(model.item_type),
        item_name=model.item_name,
        item_image=model.item_image,
        item_artists=model.item_artists,
        rating=model.rating,
        review=model.review,
        created_at=ensure_utc_aware(model.created_at),
        updated_at=ensure_utc_aware(model.updated_at),
    )


def _apply_rating(model: RatingModel, rating: Rating) -> None:
    model.item_type = rating.item_type.value
    model.item_name = rating.item_name
    model.item_image = rating.item_image
    model.item_artists = rating.item_artists
    model.rating = rating.rating
    model.review = rating.review
    model.updated_at = utc_now()


def _profile_from_model(model: ProfileModel) -> Profile:
    return Profile(
        id=model.id,
        username=model.username,
        avatar_url=model.avatar_url,
        bio=model.bio,
    )


def _favorite_from_model(model: FavoriteModel) -> Favorite:
    return Favorite(
        user_id=model.user_id,
        favorite_type=FavoriteType(model.favorite_type),
        position=model.position,
        item_id=model.item_id,
        item_name=model.item_name,
        item_image=model.item_image,
        item_artists=model.item_artists,
    )


def _preferences_from_model(model: PreferencesModel) -> UserPreferences:
    return UserPreferences(
        user_id=model.user_id,
        favorite_artists=[
            FavoriteArtistRef.from_dict(item) for item in (model.favorite_artists or [])
        ],
        created_at=ensure_utc_aware(model.created_at),
        updated_at=ensure_utc_aware(model.updated_at),
    )


class RatingRepository(IRatingRepository):
    """SQLAlchemy implementation of the ratings store."""

    # Hey future me, this is the Repository pattern! The session is injected per request and
    # NOT committed here - Database.session_scope() commits when the request succeeds and rolls
    # back when anything raises. Repos only stage changes and flush when they need an id.
    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def _get_model(self, user_id: str, item_id: str) -> RatingModel | None:
        stmt = select(RatingModel).where(
            RatingModel.user_id == user_id, RatingModel.item_id == item_id
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    # Listen up - UPSERT keyed by (user_id, item_id): re-rating overwrites score, review and
    # item metadata, bumps updated_at and keeps created_at. The unique constraint backs it up:
    # when a concurrent request inserts the same pair between our SELECT and INSERT, the
    # INSERT fails inside its SAVEPOINT and we update the row that won instead.
    async def upsert(self, rating: Rating) -> Rating:
        """Insert or update the (user_id, item_id) rating."""
        model = await self._get_model(rating.user_id, rating.item_id)
        if model is None:
            try:
                async with self.session.begin_nested():
                    model = RatingModel(
                        user_id=rating.user_id,
                        item_id=rating.item_id,
                        item_type=rating.item_type.value,
                        item_name=rating.item_name,
                        item_image=rating.item_image,
                        item_artists=rating.item_artists,
                        rating=rating.rating,
                        review=rating.review,
                        created_at=rating.created_at,
                        updated_at=rating.updated_at,
                    )
                    self.session.add(model)
                return _rating_from_model(model)
            except IntegrityError:
                model = await self._get_model(rating.user_id, rating.item_id)
                if model is None:
                    raise

        _apply_rating(model, rating)
        await self.session.flush()
        return _rating_from_model(model)

    async def get(self, user_id: str, item_id: str) -> Rating | None:
        model = await self._get_model(user_id, item_id)
        return _rating_from_model(model) if model else None

    async def list_by_user(
        self, user_id: str, item_type: ItemType | None = None, limit: int | None = None
    ) -> list[Rating]:
        stmt = select(RatingModel).where(RatingModel.user_id == user_id)
        if item_type is not None:
            stmt = stmt.where(RatingModel.item_type == ItemType(item_type).value)
        stmt = stmt.order_by(RatingModel.created_at.desc(), RatingModel.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return [_rating_from_model(model) for model in result.scalars().all()]

    async def list_by_users(self, user_ids: list[str], limit: int = 50) -> list[Rating]:
        if not user_ids:
            return []
        stmt = (
            select(RatingModel)
            .where(RatingModel.user_id.in_(user_ids))
            .order_by(RatingModel.created_at.desc(), RatingModel.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_rating_from_model(model) for model in result.scalars().all()]

    async def list_by_item(
        self, item_id: str, item_type: ItemType | None = None
    ) -> list[Rating]:
        stmt = select(RatingModel).where(RatingModel.item_id == item_id)
        if item_type is not None:
            stmt = stmt.where(RatingModel.item_type == ItemType(item_type).value)
        stmt = stmt.order_by(RatingModel.created_at.desc(), RatingModel.id.desc())
        result = await self.session.execute(stmt)
        return [_rating_from_model(model) for model in result.scalars().all()]

    async def list_recent(self, limit: int = 10) -> list[Rating]:
        stmt = (
            select(RatingModel)
            .order_by(RatingModel.created_at.desc(), RatingModel.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_rating_from_model(model) for model in result.scalars().all()]

    async def delete(self, user_id: str, item_id: str) -> bool:
        stmt = delete(RatingModel).where(
            RatingModel.user_id == user_id, RatingModel.item_id == item_id
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def summarize(self, item_id: str) -> RatingSummary:
        stmt = select(func.avg(RatingModel.rating), func.count(RatingModel.id)).where(
            RatingModel.item_id == item_id
        )
        result = await self.session.execute(stmt)
        average, count = result.one()
        return RatingSummary(
            item_id=item_id,
            average=round(float(average), 2) if average is not None else 0.0,
            count=int(count or 0),
        )


class ProfileRepository(IProfileRepository):
    """SQLAlchemy implementation of the profiles store."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def get(self, user_id: str) -> Profile | None:
        model = await self.session.get(ProfileModel, user_id)
        return _profile_from_model(model) if model else None

    # Yo, this is the batched "in" lookup the feed stitching relies on. Order of the
    # returned list is NOT the order of user_ids - callers build a dict.
    async def get_by_ids(self, user_ids: list[str]) -> list[Profile]:
        if not user_ids:
            return []
        stmt = select(ProfileModel).where(ProfileModel.id.in_(user_ids))
        result = await self.session.execute(stmt)
        return [_profile_from_model(model) for model in result.scalars().all()]

    async def search_by_username(self, fragment: str, limit: int = 10) -> list[Profile]:
        escaped = fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        stmt = (
            select(ProfileModel)
            .where(ProfileModel.username.ilike(f"%{escaped}%", escape="\\"))
            .order_by(func.lower(ProfileModel.username))
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_profile_from_model(model) for model in result.scalars().all()]

    async def upsert(self, profile: Profile) -> Profile:
        model = await self.session.get(ProfileModel, profile.id)
        if model is None:
            model = ProfileModel(
                id=profile.id,
                username=profile.username,
                avatar_url=profile.avatar_url,
                bio=profile.bio,
            )
            self.session.add(model)
        else:
            model.username = profile.username
            model.avatar_url = profile.avatar_url
            model.bio = profile.bio
        await self.session.flush()
        return _profile_from_model(model)


class FollowRepository(IFollowRepository):
    """SQLAlchemy implementation of the follows store."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(self, follower_id: str, following_id: str) -> None:
        """Insert the pair.

        Raises:
            DuplicateEntityException: If the pair exists (e.g. a concurrent follow won)
        """
        try:
            async with self.session.begin_nested():
                self.session.add(FollowModel(follower_id=follower_id, following_id=following_id))
        except IntegrityError as e:
            raise DuplicateEntityException("Follow", f"{follower_id}->{following_id}") from e

    async def remove(self, follower_id: str, following_id: str) -> bool:
        stmt = delete(FollowModel).where(
            FollowModel.follower_id == follower_id,
            FollowModel.following_id == following_id,
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def exists(self, follower_id: str, following_id: str) -> bool:
        stmt = select(FollowModel.id).where(
            FollowModel.follower_id == follower_id,
            FollowModel.following_id == following_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def count_followers(self, user_id: str) -> int:
        stmt = select(func.count(FollowModel.id)).where(FollowModel.following_id == user_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def count_following(self, user_id: str) -> int:
        stmt = select(func.count(FollowModel.id)).where(FollowModel.follower_id == user_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list_following_ids(self, follower_id: str) -> list[str]:
        stmt = select(FollowModel.following_id).where(FollowModel.follower_id == follower_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class FavoriteRepository(IFavoriteRepository):
    """SQLAlchemy implementation of the favorites shelf."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def upsert(self, favorite: Favorite) -> Favorite:
        stmt = select(FavoriteModel).where(
            FavoriteModel.user_id == favorite.user_id,
            FavoriteModel.favorite_type == favorite.favorite_type.value,
            FavoriteModel.position == favorite.position,
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            model = FavoriteModel(
                user_id=favorite.user_id,
                favorite_type=favorite.favorite_type.value,
                position=favorite.position,
                item_id=favorite.item_id,
                item_name=favorite.item_name,
                item_image=favorite.item_image,
                item_artists=favorite.item_artists,
            )
            self.session.add(model)
        else:
            model.item_id = favorite.item_id
            model.item_name = favorite.item_name
            model.item_image = favorite.item_image
            model.item_artists = favorite.item_artists
        await self.session.flush()
        return _favorite_from_model(model)

    async def list_by_user(self, user_id: str) -> list[Favorite]:
        stmt = (
            select(FavoriteModel)
            .where(FavoriteModel.user_id == user_id)
            .order_by(FavoriteModel.favorite_type, FavoriteModel.position)
        )
        result = await self.session.execute(stmt)
        return [_favorite_from_model(model) for model in result.scalars().all()]

    async def delete(self, user_id: str, favorite_type: FavoriteType, position: int) -> bool:
        stmt = delete(FavoriteModel).where(
            FavoriteModel.user_id == user_id,
            FavoriteModel.favorite_type == FavoriteType(favorite_type).value,
            FavoriteModel.position == position,
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]


class PreferencesRepository(IPreferencesRepository):
    """SQLAlchemy implementation of user preferences."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def get(self, user_id: str) -> UserPreferences | None:
        model = await self.session.get(PreferencesModel, user_id)
        return _preferences_from_model(model) if model else None

    async def save(self, preferences: UserPreferences) -> UserPreferences:
        model = await self.session.get(PreferencesModel, preferences.user_id)
        artists = [artist.to_dict() for artist in preferences.favorite_artists]
        if model is None:
            model = PreferencesModel(user_id=preferences.user_id, favorite_artists=artists)
            self.session.add(model)
        else:
            # Reassign (never mutate in place) so the JSON column is marked dirty
            model.favorite_artists = artists
            model.updated_at = utc_now()
        await self.session.flush()
        return _preferences_from_model(model)

    # Hey future me – this is the write behind the auto-favorite rating hook. It runs in a
    # SAVEPOINT: if it blows up, only the savepoint is rolled back and the rating that was
    # upserted earlier in the same transaction still commits.
    async def add_favorite_artist(self, user_id: str, artist: FavoriteArtistRef) -> bool:
        async with self.session.begin_nested():
            model = await self.session.get(PreferencesModel, user_id)
            if model is None:
                self.session.add(
                    PreferencesModel(user_id=user_id, favorite_artists=[artist.to_dict()])
                )
                await self.session.flush()
                return True

            current = list(model.favorite_artists or [])
            if any(item.get("id") == artist.id for item in current):
                return False
            model.favorite_artists = [*current, artist.to_dict()]
            model.updated_at = utc_now()
            await self.session.flush()
            return True


__all__ = [
    "FavoriteRepository",
    "FollowRepository",
    "PreferencesRepository",
    "ProfileRepository",
    "RatingRepository",
]
