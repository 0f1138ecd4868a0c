"""Tests for catalog response schemas."""

from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from soundrate.domain.dtos import (
    ArtistList,
    CatalogAlbum,
    CatalogArtist,
    NewReleasesResponse,
    SearchResponse,
    TokenResponse,
    parse_release_date,
)


class TestParseReleaseDate:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2024-03-15", date(2024, 3, 15)),
            ("2024-03", date(2024, 3, 1)),
            ("1998", date(1998, 1, 1)),
            (None, date.min),
            ("", date.min),
            ("0000", date.min),
            ("soon", date.min),
        ],
    )
    def test_precisions(self, value: str | None, expected: date) -> None:
        assert parse_release_date(value) == expected


class TestCatalogArtist:
    def test_optional_fields_default_to_none(self) -> None:
        artist = CatalogArtist.model_validate({"id": "a1", "name": "Air"})

        assert artist.follower_count is None
        assert artist.popularity is None
        assert artist.genres == []
        assert artist.image_url is None

    def test_followers_with_null_total(self) -> None:
        artist = CatalogArtist.model_validate(
            {"id": "a1", "name": "Air", "followers": {"href": None, "total": None}}
        )

        assert artist.follower_count is None

    def test_widest_image_wins(self) -> None:
        artist = CatalogArtist.model_validate(
            {
                "id": "a1",
                "name": "Air",
                "images": [
                    {"url": "small", "width": 64, "height": 64},
                    {"url": "large", "width": 640, "height": 640},
                ],
            }
        )

        assert artist.image_url == "large"

    def test_missing_id_is_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            CatalogArtist.model_validate({"name": "no id"})


class TestEnvelopes:
    def test_null_entries_are_dropped(self) -> None:
        artists = ArtistList.model_validate({"artists": [None, {"id": "a1", "name": "Air"}]})

        assert [a.id for a in artists.artists] == ["a1"]

    def test_search_response_unknown_fields_ignored(self) -> None:
        response = SearchResponse.model_validate(
            {"albums": {"items": [{"id": "al1", "name": "X", "extra": 1}]}, "shows": {}}
        )

        assert response.tracks is None
        assert response.albums is not None
        assert isinstance(response.albums.items[0], CatalogAlbum)

    def test_new_releases_default_to_empty_page(self) -> None:
        assert NewReleasesResponse.model_validate({}).albums.items == []

    def test_album_detail_keeps_tracklist(self) -> None:
        album = CatalogAlbum.model_validate(
            {
                "id": "al1",
                "name": "Discovery",
                "tracks": {
                    "items": [
                        {"id": "t1", "name": "One More Time", "track_number": 1},
                        None,
                        {"id": "t2", "name": "Aerodynamic"},
                    ],
                    "total": 2,
                },
            }
        )

        assert album.tracks is not None
        assert [track.id for track in album.tracks.items] == ["t1", "t2"]
        assert album.tracks.items[0].album is None
        assert album.model_dump()["tracks"]["total"] == 2

    def test_album_without_tracklist(self) -> None:
        assert CatalogAlbum.model_validate({"id": "al1", "name": "X"}).tracks is None


class TestTokenResponse:
    def test_requires_positive_lifetime(self) -> None:
        with pytest.raises(PydanticValidationError):
            TokenResponse.model_validate({"access_token": "t", "expires_in": 0})

    def test_requires_token(self) -> None:
        with pytest.raises(PydanticValidationError):
            TokenResponse.model_validate({"access_token": "", "expires_in": 3600})
