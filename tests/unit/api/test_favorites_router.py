"""Tests for favorites shelf and preferences endpoints."""

from fastapi.testclient import TestClient

ALICE = {"X-User-Id": "alice"}


def favorite_body(position: int = 1, item_id: str = "al1") -> dict[str, object]:
    return {
        "favorite_type": "album",
        "position": position,
        "item_id": item_id,
        "item_name": f"Album {item_id}",
    }


class TestFavoritesRouter:
    def test_set_list_and_remove(self, client: TestClient) -> None:
        client.put("/api/favorites", json=favorite_body(2, "b"), headers=ALICE)
        client.put("/api/favorites", json=favorite_body(1, "a"), headers=ALICE)
        client.put("/api/favorites", json=favorite_body(1, "c"), headers=ALICE)

        shelf = client.get("/api/favorites", headers=ALICE).json()
        assert [f["item_id"] for f in shelf["albums"]] == ["c", "b"]
        assert shelf["tracks"] == []

        removed = client.delete("/api/favorites?favorite_type=album&position=1", headers=ALICE)
        missing = client.delete("/api/favorites?favorite_type=album&position=1", headers=ALICE)
        assert removed.status_code == 204
        assert missing.status_code == 404

    def test_out_of_range_position_is_422(self, client: TestClient) -> None:
        response = client.put("/api/favorites", json=favorite_body(6), headers=ALICE)

        assert response.status_code == 422

    def test_other_users_shelf(self, client: TestClient) -> None:
        client.put("/api/favorites", json=favorite_body(), headers={"X-User-Id": "bob"})

        shelf = client.get("/api/favorites?user_id=bob", headers=ALICE).json()

        assert shelf["user_id"] == "bob"
        assert len(shelf["albums"]) == 1


class TestPreferencesRouter:
    def test_empty_until_onboarding(self, client: TestClient) -> None:
        assert client.get("/api/preferences", headers=ALICE).json() == {
            "user_id": "alice",
            "favorite_artists": [],
        }

    def test_save_favorite_artists(self, client: TestClient) -> None:
        artists = [{"id": f"a{i}", "name": f"Artist {i}"} for i in range(3)]

        response = client.put(
            "/api/preferences/artists", json={"artists": artists}, headers=ALICE
        )

        assert response.status_code == 200
        assert [a["id"] for a in response.json()["favorite_artists"]] == ["a0", "a1", "a2"]

    def test_too_few_artists(self, client: TestClient) -> None:
        response = client.put(
            "/api/preferences/artists",
            json={"artists": [{"id": "a", "name": "A"}]},
            headers=ALICE,
        )

        assert response.status_code == 422
