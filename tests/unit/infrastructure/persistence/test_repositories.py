"""Repository tests against an in-memory SQLite database."""

from datetime import UTC, datetime, timedelta

import pytest
from pytest_mock import MockerFixture
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from soundrate.domain.entities import (
    Favorite,
    FavoriteArtistRef,
    FavoriteType,
    ItemType,
    Profile,
    Rating,
    UserPreferences,
)
from soundrate.domain.exceptions import DuplicateEntityException
from soundrate.infrastructure.persistence import (
    Database,
    FavoriteRepository,
    FollowRepository,
    PreferencesRepository,
    ProfileRepository,
    RatingRepository,
)
from soundrate.infrastructure.persistence.models import FollowModel

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def rating(
    user_id: str = "alice",
    item_id: str = "al1",
    score: float = 4.0,
    item_type: ItemType = ItemType.ALBUM,
    minutes: int = 0,
    review: str | None = None,
) -> Rating:
    created = BASE_TIME + timedelta(minutes=minutes)
    return Rating(
        user_id=user_id,
        item_id=item_id,
        item_type=item_type,
        item_name=f"Item {item_id}",
        rating=score,
        review=review,
        created_at=created,
        updated_at=created,
    )


class TestRatingRepository:
    async def test_upsert_twice_keeps_one_row_with_latest_value(
        self, session: AsyncSession
    ) -> None:
        repo = RatingRepository(session)

        first = await repo.upsert(rating(score=2.0, review="meh"))
        second = await repo.upsert(rating(score=4.5, review="grew on me", minutes=30))

        assert second.id == first.id
        assert second.rating == 4.5
        assert second.review == "grew on me"
        assert second.created_at == first.created_at
        assert len(await repo.list_by_user("alice")) == 1

    async def test_upsert_updates_row_inserted_after_lookup(
        self, session: AsyncSession, mocker: MockerFixture
    ) -> None:
        repo = RatingRepository(session)
        first = await repo.upsert(rating(score=2.0))
        existing = await repo._get_model("alice", "al1")
        # the first lookup misses as if another request inserted the row right after it
        mocker.patch.object(repo, "_get_model", side_effect=[None, existing])

        second = await repo.upsert(rating(score=5.0, review="changed my mind"))

        assert second.id == first.id
        assert second.rating == 5.0
        assert second.review == "changed my mind"
        assert len(await repo.list_by_user("alice")) == 1

    async def test_get_returns_none_when_missing(self, session: AsyncSession) -> None:
        assert await RatingRepository(session).get("alice", "nope") is None

    async def test_list_recent_is_newest_first(self, session: AsyncSession) -> None:
        repo = RatingRepository(session)
        await repo.upsert(rating(item_id="old", minutes=0))
        await repo.upsert(rating(user_id="bob", item_id="new", minutes=10))
        await repo.upsert(rating(item_id="mid", minutes=5))

        recent = await repo.list_recent(limit=2)

        assert [r.item_id for r in recent] == ["new", "mid"]

    async def test_list_by_user_filters_type(self, session: AsyncSession) -> None:
        repo = RatingRepository(session)
        await repo.upsert(rating(item_id="al1"))
        await repo.upsert(rating(item_id="t1", item_type=ItemType.TRACK))

        tracks = await repo.list_by_user("alice", ItemType.TRACK)

        assert [r.item_id for r in tracks] == ["t1"]

    async def test_list_by_users_only_returns_given_users(self, session: AsyncSession) -> None:
        repo = RatingRepository(session)
        await repo.upsert(rating(user_id="alice"))
        await repo.upsert(rating(user_id="bob", item_id="x"))
        await repo.upsert(rating(user_id="carol", item_id="y"))

        result = await repo.list_by_users(["bob", "carol"])

        assert {r.user_id for r in result} == {"bob", "carol"}
        assert await repo.list_by_users([]) == []

    async def test_summary_averages_all_ratings(self, session: AsyncSession) -> None:
        repo = RatingRepository(session)
        await repo.upsert(rating(user_id="alice", score=4.0))
        await repo.upsert(rating(user_id="bob", score=3.0))
        await repo.upsert(rating(user_id="carol", score=3.5))

        summary = await repo.summarize("al1")

        assert summary.count == 3
        assert summary.average == 3.5

    async def test_summary_of_unrated_item(self, session: AsyncSession) -> None:
        summary = await RatingRepository(session).summarize("nobody-rated-this")

        assert (summary.average, summary.count) == (0.0, 0)

    async def test_delete(self, session: AsyncSession) -> None:
        repo = RatingRepository(session)
        await repo.upsert(rating())

        assert await repo.delete("alice", "al1") is True
        assert await repo.delete("alice", "al1") is False


class TestProfileRepository:
    async def test_get_by_ids_skips_unknown(self, session: AsyncSession) -> None:
        repo = ProfileRepository(session)
        await repo.upsert(Profile(id="u1", username="alice"))

        profiles = await repo.get_by_ids(["u1", "ghost"])

        assert [p.id for p in profiles] == ["u1"]

    async def test_username_search_is_case_insensitive(self, session: AsyncSession) -> None:
        repo = ProfileRepository(session)
        await repo.upsert(Profile(id="u1", username="Alice"))
        await repo.upsert(Profile(id="u2", username="malice_k"))
        await repo.upsert(Profile(id="u3", username="bob"))

        found = await repo.search_by_username("ALI")

        assert [p.username for p in found] == ["Alice", "malice_k"]

    async def test_wildcards_are_matched_literally(self, session: AsyncSession) -> None:
        repo = ProfileRepository(session)
        await repo.upsert(Profile(id="u1", username="a_b"))
        await repo.upsert(Profile(id="u2", username="axb"))

        found = await repo.search_by_username("a_")

        assert [p.username for p in found] == ["a_b"]

    async def test_upsert_updates_existing(self, session: AsyncSession) -> None:
        repo = ProfileRepository(session)
        await repo.upsert(Profile(id="u1", username="alice"))
        await repo.upsert(Profile(id="u1", username="alice", bio="hello"))

        profile = await repo.get("u1")

        assert profile is not None
        assert profile.bio == "hello"


class TestFollowRepository:
    async def test_counts_and_listing(self, session: AsyncSession) -> None:
        repo = FollowRepository(session)
        await repo.add("alice", "bob")
        await repo.add("carol", "bob")
        await repo.add("bob", "alice")

        assert await repo.count_followers("bob") == 2
        assert await repo.count_following("bob") == 1
        assert await repo.exists("alice", "bob")
        assert not await repo.exists("bob", "carol")
        assert await repo.list_following_ids("alice") == ["bob"]

    async def test_remove(self, session: AsyncSession) -> None:
        repo = FollowRepository(session)
        await repo.add("alice", "bob")

        assert await repo.remove("alice", "bob") is True
        assert await repo.remove("alice", "bob") is False

    async def test_adding_existing_pair_is_duplicate(self, session: AsyncSession) -> None:
        repo = FollowRepository(session)
        await repo.add("alice", "bob")

        with pytest.raises(DuplicateEntityException):
            await repo.add("alice", "bob")

        assert await repo.count_followers("bob") == 1


class TestFavoriteRepository:
    async def test_slot_is_replaced(self, session: AsyncSession) -> None:
        repo = FavoriteRepository(session)
        await repo.upsert(Favorite("alice", FavoriteType.ALBUM, 1, "al1", "First"))
        await repo.upsert(Favorite("alice", FavoriteType.ALBUM, 1, "al2", "Second"))
        await repo.upsert(Favorite("alice", FavoriteType.TRACK, 1, "t1", "Track"))

        favorites = await repo.list_by_user("alice")

        albums = [f for f in favorites if f.favorite_type == FavoriteType.ALBUM]
        assert [f.item_id for f in albums] == ["al2"]
        assert len(favorites) == 2

    async def test_delete_slot(self, session: AsyncSession) -> None:
        repo = FavoriteRepository(session)
        await repo.upsert(Favorite("alice", FavoriteType.ARTIST, 3, "a1", "Air"))

        assert await repo.delete("alice", FavoriteType.ARTIST, 3) is True
        assert await repo.list_by_user("alice") == []


class TestPreferencesRepository:
    async def test_add_favorite_artist_creates_then_deduplicates(
        self, session: AsyncSession
    ) -> None:
        repo = PreferencesRepository(session)
        artist = FavoriteArtistRef(id="daft", name="Daft Punk", image_url="https://img/d.jpg")

        assert await repo.add_favorite_artist("alice", artist) is True
        assert await repo.add_favorite_artist("alice", artist) is False
        assert await repo.add_favorite_artist(
            "alice", FavoriteArtistRef(id="air", name="Air")
        ) is True

        preferences = await repo.get("alice")
        assert preferences is not None
        assert preferences.artist_ids == ["daft", "air"]
        assert preferences.favorite_artists[0].image_url == "https://img/d.jpg"

    async def test_save_replaces_artist_list(self, session: AsyncSession) -> None:
        repo = PreferencesRepository(session)
        await repo.save(
            UserPreferences(user_id="alice", favorite_artists=[FavoriteArtistRef("a", "A")])
        )

        saved = await repo.save(
            UserPreferences(
                user_id="alice",
                favorite_artists=[FavoriteArtistRef("b", "B"), FavoriteArtistRef("c", "C")],
            )
        )

        assert saved.artist_ids == ["b", "c"]


class TestTransactions:
    async def test_failed_savepoint_keeps_outer_rating(self, db: Database) -> None:
        async with db.session_scope() as session:
            await FollowRepository(session).add("alice", "bob")

        async with db.session_scope() as session:
            await RatingRepository(session).upsert(rating())
            with pytest.raises(IntegrityError):
                async with session.begin_nested():
                    session.add(FollowModel(follower_id="alice", following_id="bob"))

        async with db.session_scope() as session:
            assert await RatingRepository(session).get("alice", "al1") is not None
            assert await FollowRepository(session).count_followers("bob") == 1

    async def test_duplicate_follow_is_conflict_and_keeps_outer_rating(
        self, db: Database
    ) -> None:
        async with db.session_scope() as session:
            await FollowRepository(session).add("alice", "bob")

        async with db.session_scope() as session:
            await RatingRepository(session).upsert(rating())
            with pytest.raises(DuplicateEntityException):
                await FollowRepository(session).add("alice", "bob")

        async with db.session_scope() as session:
            assert await RatingRepository(session).get("alice", "al1") is not None
            assert await FollowRepository(session).count_followers("bob") == 1

    async def test_error_rolls_back_whole_scope(self, db: Database) -> None:
        with pytest.raises(RuntimeError):
            async with db.session_scope() as session:
                await RatingRepository(session).upsert(rating())
                raise RuntimeError("request failed")

        async with db.session_scope() as session:
            assert await RatingRepository(session).get("alice", "al1") is None
