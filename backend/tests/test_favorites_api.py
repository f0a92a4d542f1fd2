import unittest
from types import SimpleNamespace
from unittest.mock import patch
from uuid import uuid4

from fastapi.testclient import TestClient

from mrp.db.session import get_db
from mrp.deps.auth import get_current_user
from mrp.main import app
from mrp.services.favorite_service import UnknownMediaError


class TestFavoritesApi(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)
        app.dependency_overrides[get_db] = lambda: iter([object()])
        self.user = SimpleNamespace(id=uuid4(), username="alice", is_moderator=False)
        app.dependency_overrides[get_current_user] = lambda: self.user

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def test_favorites_require_auth(self) -> None:
        app.dependency_overrides.pop(get_current_user)
        response = self.client.get("/api/favorites")
        self.assertEqual(response.status_code, 401)

    def test_list(self) -> None:
        row = SimpleNamespace(
            id=uuid4(),
            owner_id=uuid4(),
            title="Dark",
            description=None,
            media_type="series",
            release_year=2017,
            genres="sci-fi",
            age_restriction=None,
        )
        with patch("mrp.api.favorites.list_favorites", return_value=[row]) as list_mock:
            response = self.client.get("/api/favorites")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()[0]["title"], "Dark")
        self.assertEqual(list_mock.call_args.args[1], self.user.id)

    def test_add(self) -> None:
        media_id = uuid4()
        with patch("mrp.api.favorites.add_favorite", return_value=True) as add:
            response = self.client.post("/api/favorites", json={"mediaId": str(media_id)})

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json(), {"message": "Added to favorites"})
        self.assertEqual(add.call_args.args[1:], (self.user.id, media_id))

    def test_add_twice_still_succeeds(self) -> None:
        with patch("mrp.api.favorites.add_favorite", return_value=False):
            response = self.client.post("/api/favorites", json={"mediaId": str(uuid4())})
        self.assertEqual(response.status_code, 201)

    def test_add_unknown_media_returns_400(self) -> None:
        with patch(
            "mrp.api.favorites.add_favorite",
            side_effect=UnknownMediaError("Media entry not found"),
        ):
            response = self.client.post("/api/favorites", json={"mediaId": str(uuid4())})

        self.assertEqual(response.status_code, 400)

    def test_add_without_media_id_returns_400(self) -> None:
        response = self.client.post("/api/favorites", json={})
        self.assertEqual(response.status_code, 400)

    def test_remove_is_idempotent(self) -> None:
        with patch("mrp.api.favorites.remove_favorite", return_value=None):
            first = self.client.delete(f"/api/favorites/{uuid4()}")
            second = self.client.delete(f"/api/favorites/{uuid4()}")

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(first.json(), {"message": "Removed from favorites"})

    def test_status(self) -> None:
        with patch("mrp.api.favorites.is_favorite", return_value=True):
            response = self.client.get(f"/api/favorites/{uuid4()}/status")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"isFavorite": True})

    def test_toggle(self) -> None:
        with patch("mrp.api.favorites.toggle_favorite", return_value=False):
            response = self.client.post(f"/api/favorites/{uuid4()}/toggle")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"isFavorite": False})
