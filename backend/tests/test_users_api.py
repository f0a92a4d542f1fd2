import unittest
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import patch
from uuid import uuid4

from fastapi.testclient import TestClient

from mrp.db.session import get_db
from mrp.deps.auth import get_current_user
from mrp.main import app
from mrp.services.auth_service import DuplicateUserError
from mrp.services.errors import InvalidCredentialsError, ValidationError


class TestUsersApi(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)
        app.dependency_overrides[get_db] = lambda: iter([object()])
        self.user = SimpleNamespace(id=uuid4(), username="alice", is_moderator=False)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()

    def _login_as_alice(self) -> None:
        app.dependency_overrides[get_current_user] = lambda: self.user

    def test_register_success(self) -> None:
        with patch("mrp.api.users.register_user", return_value=uuid4()) as register:
            response = self.client.post(
                "/api/users/register",
                json={"username": "alice", "password": "s3cret"},
            )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json(), {"message": "User registered successfully"})
        self.assertEqual(register.call_args.args[1:], ("alice", "s3cret"))

    def test_register_invalid_returns_400(self) -> None:
        with patch(
            "mrp.api.users.register_user",
            side_effect=ValidationError("username is required"),
        ):
            response = self.client.post("/api/users/register", json={"password": "s3cret"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "username is required"})

    def test_register_duplicate_returns_409(self) -> None:
        with patch(
            "mrp.api.users.register_user",
            side_effect=DuplicateUserError("alice"),
        ):
            response = self.client.post(
                "/api/users/register",
                json={"username": "alice", "password": "s3cret"},
            )

        self.assertEqual(response.status_code, 409)
        self.assertIn("error", response.json())

    def test_register_malformed_json_returns_400(self) -> None:
        response = self.client.post(
            "/api/users/register",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("error", response.json())

    def test_login_accepts_capitalized_keys(self) -> None:
        with patch("mrp.api.users.login_user", return_value="tok-123") as login:
            response = self.client.post(
                "/api/users/login",
                json={"Username": "alice", "Password": "s3cret"},
            )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"token": "tok-123"})
        self.assertEqual(login.call_args.args[1:], ("alice", "s3cret"))

    def test_login_accepts_lowercase_keys(self) -> None:
        with patch("mrp.api.users.login_user", return_value="tok-123") as login:
            response = self.client.post(
                "/api/users/login",
                json={"username": "alice", "password": "s3cret"},
            )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(login.call_args.args[1:], ("alice", "s3cret"))

    def test_login_bad_credentials_returns_401(self) -> None:
        with patch(
            "mrp.api.users.login_user",
            side_effect=InvalidCredentialsError("Invalid credentials"),
        ):
            response = self.client.post(
                "/api/users/login",
                json={"Username": "alice", "Password": "wrong"},
            )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Invalid credentials"})

    def test_profile_requires_token(self) -> None:
        response = self.client.get("/api/users/alice/profile")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Unauthorized"})

    def test_profile_rejects_non_bearer_scheme(self) -> None:
        response = self.client.get(
            "/api/users/alice/profile",
            headers={"Authorization": "Basic YWxpY2U6czNjcmV0"},
        )
        self.assertEqual(response.status_code, 401)

    def test_own_profile(self) -> None:
        self._login_as_alice()

        response = self.client.get("/api/users/alice/profile")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"id": str(self.user.id), "username": "alice"})

    def test_other_profile_is_forbidden(self) -> None:
        self._login_as_alice()

        response = self.client.get("/api/users/bob/profile")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"error": "Forbidden"})

    def test_statistics_use_camel_case(self) -> None:
        self._login_as_alice()
        stats = {
            "total_ratings_given": 2,
            "average_score_given": 4.5,
            "total_media_created": 1,
            "total_favorites": 0,
            "favorite_genre": "none",
            "top_genres": [],
            "average_rating_received": 0.0,
        }
        with patch("mrp.api.users.get_user_statistics", return_value=stats):
            response = self.client.get("/api/users/alice/statistics")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["totalRatingsGiven"], 2)
        self.assertEqual(body["averageScoreGiven"], 4.5)
        self.assertEqual(body["favoriteGenre"], "none")

    def test_statistics_of_other_user_is_forbidden(self) -> None:
        self._login_as_alice()
        with patch("mrp.api.users.get_user_statistics") as stats:
            response = self.client.get("/api/users/bob/statistics")
        self.assertEqual(response.status_code, 403)
        stats.assert_not_called()

    def test_activity(self) -> None:
        self._login_as_alice()
        rating_id, media_id = uuid4(), uuid4()
        activity = {
            "most_recent_rating": {
                "id": rating_id,
                "media_id": media_id,
                "stars": 4,
                "comment": None,
            },
            "ratings_distribution": {4: 1},
        }
        with patch("mrp.api.users.get_user_activity", return_value=activity):
            response = self.client.get("/api/users/alice/activity")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["mostRecentRating"]["mediaId"], str(media_id))
        self.assertEqual(body["ratingsDistribution"], {"4": 1})

    def test_own_ratings_include_every_status(self) -> None:
        self._login_as_alice()
        row = SimpleNamespace(
            id=uuid4(),
            media_id=uuid4(),
            user_id=self.user.id,
            stars=3,
            comment="fine",
            approval_status="pending",
            created_at=datetime.now(timezone.utc),
        )
        with patch("mrp.api.users.list_ratings_by_user", return_value=[row]):
            response = self.client.get("/api/users/alice/ratings")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()[0]["approvalStatus"], "pending")
