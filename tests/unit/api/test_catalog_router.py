"""Tests for the catalog proxy endpoints."""

from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from soundrate.api.dependencies import get_db_session
from soundrate.domain.dtos import (
    CatalogAlbum,
    CatalogArtist,
    CatalogTrack,
    Page,
    SearchResponse,
)
from soundrate.domain.exceptions import (
    CatalogAuthError,
    ConfigurationError,
    RateLimitExceededError,
    UpstreamUnavailableError,
)


class TestSearchEndpoint:
    def test_search_one_kind(self, client: TestClient, catalog_client: AsyncMock) -> None:
        catalog_client.search.return_value = SearchResponse(
            artists=Page[CatalogArtist](
                items=[
                    CatalogArtist(id="a1", name="Daft Punk"),
                    CatalogArtist(id="a2", name="Daft Punk Tribute"),
                ]
            )
        )

        response = client.get("/api/catalog/search?q=Daft Punk&kind=artist&limit=5")

        assert response.status_code == 200
        body = response.json()
        assert [a["name"] for a in body["artists"]] == ["Daft Punk", "Daft Punk Tribute"]
        assert body["tracks"] == []
        catalog_client.search.assert_awaited_once_with("Daft Punk", "artist", 5)

    def test_search_all_kinds(self, client: TestClient, catalog_client: AsyncMock) -> None:
        catalog_client.search.return_value = SearchResponse()

        response = client.get("/api/catalog/search?q=air")

        assert response.status_code == 200
        assert catalog_client.search.await_count == 3

    def test_search_does_not_open_a_database_session(
        self, app: FastAPI, client: TestClient, catalog_client: AsyncMock
    ) -> None:
        opened: list[bool] = []

        def track_session() -> None:
            opened.append(True)

        app.dependency_overrides[get_db_session] = track_session
        catalog_client.search.return_value = SearchResponse()

        assert client.get("/api/catalog/search?q=air").status_code == 200
        assert opened == []

    def test_upstream_failure_is_empty_200(
        self, client: TestClient, catalog_client: AsyncMock
    ) -> None:
        catalog_client.search.side_effect = UpstreamUnavailableError("down", http_status=503)

        response = client.get("/api/catalog/search?q=air&kind=track")

        assert response.status_code == 200
        assert response.json()["tracks"] == []

    def test_unknown_kind_is_rejected(self, client: TestClient) -> None:
        assert client.get("/api/catalog/search?q=air&kind=podcast").status_code == 422


class TestDetailEndpoints:
    def test_artist(self, client: TestClient, catalog_client: AsyncMock) -> None:
        catalog_client.get_artist.return_value = CatalogArtist(id="a1", name="Air", popularity=70)

        body = client.get("/api/catalog/artists/a1").json()

        assert body["name"] == "Air"
        assert body["follower_count"] is None

    def test_album_includes_tracklist(
        self, client: TestClient, catalog_client: AsyncMock
    ) -> None:
        catalog_client.get_album.return_value = CatalogAlbum(
            id="al1",
            name="Discovery",
            tracks=Page[CatalogTrack](
                items=[
                    CatalogTrack(id="t1", name="One More Time"),
                    CatalogTrack(id="t2", name="Aerodynamic"),
                ],
                total=2,
            ),
        )

        response = client.get("/api/catalog/albums/al1")

        assert response.status_code == 200
        tracks = response.json()["tracks"]
        assert [track["id"] for track in tracks["items"]] == ["t1", "t2"]
        assert tracks["total"] == 2

    def test_upstream_failure_is_502(
        self, client: TestClient, catalog_client: AsyncMock
    ) -> None:
        catalog_client.get_album.side_effect = UpstreamUnavailableError("down", http_status=500)

        response = client.get("/api/catalog/albums/al1")

        assert response.status_code == 502
        assert "detail" in response.json()

    def test_rate_limit_is_429_with_retry_after(
        self, client: TestClient, catalog_client: AsyncMock
    ) -> None:
        catalog_client.get_track.side_effect = RateLimitExceededError("slow", retry_after=7)

        response = client.get("/api/catalog/tracks/t1")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "7"

    def test_credential_rejection_is_502(
        self, client: TestClient, catalog_client: AsyncMock
    ) -> None:
        catalog_client.get_artist.side_effect = CatalogAuthError("rejected", http_status=400)

        assert client.get("/api/catalog/artists/a1").status_code == 502

    def test_missing_credentials_is_503(
        self, client: TestClient, catalog_client: AsyncMock
    ) -> None:
        catalog_client.get_track.side_effect = ConfigurationError("not configured")

        assert client.get("/api/catalog/tracks/t1").status_code == 503


class TestListEndpoints:
    def test_new_releases_degrade(self, client: TestClient, catalog_client: AsyncMock) -> None:
        catalog_client.get_new_releases.side_effect = UpstreamUnavailableError("down")

        response = client.get("/api/catalog/new-releases")

        assert response.status_code == 200
        assert response.json() == []

    def test_recommendations_by_genre(
        self, client: TestClient, catalog_client: AsyncMock
    ) -> None:
        catalog_client.get_recommendations.return_value = [CatalogTrack(id="t1", name="Song")]

        response = client.get("/api/catalog/recommendations?genre=Hip Hop&limit=5")

        assert [t["id"] for t in response.json()] == ["t1"]
        catalog_client.get_recommendations.assert_awaited_once_with(
            seed_artists=None, seed_genres=["hip-hop"], limit=5
        )

    def test_recommendations_without_seeds_use_top_tracks(
        self, client: TestClient, catalog_client: AsyncMock
    ) -> None:
        catalog_client.search.return_value = SearchResponse(
            tracks=Page[CatalogTrack](items=[CatalogTrack(id="top", name="Top", popularity=9)])
        )

        response = client.get("/api/catalog/recommendations")

        assert [t["id"] for t in response.json()] == ["top"]
        catalog_client.get_recommendations.assert_not_called()

    def test_artist_albums_from_detail_route(
        self, client: TestClient, catalog_client: AsyncMock
    ) -> None:
        catalog_client.get_artist_albums.return_value = [
            CatalogAlbum(id="al1", name="Moon Safari", release_date="1998-01-16")
        ]

        body = client.get("/api/catalog/artists/a1/albums?limit=3").json()

        assert body[0]["name"] == "Moon Safari"
        catalog_client.get_artist_albums.assert_awaited_once_with("a1", limit=3)
