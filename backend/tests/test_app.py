import unittest

from fastapi.testclient import TestClient

from mrp.main import app


class TestAppEnvelope(unittest.TestCase):
    def setUp(self) -> None:
        self.client = TestClient(app)

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_json_responses_declare_utf8(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.headers["content-type"], "application/json; charset=utf-8")

    def test_preflight_is_empty_200_on_any_path(self) -> None:
        for path in ("/api/media", "/api/users/login", "/api/ratings/whatever/approve", "/nope"):
            with self.subTest(path=path):
                response = self.client.options(path)
                self.assertEqual(response.status_code, 200)
                self.assertEqual(response.content, b"")
                self.assertEqual(response.headers["access-control-allow-origin"], "*")

    def test_unknown_path_is_404_envelope(self) -> None:
        response = self.client.get("/api/unknown")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Not Found"})
        self.assertEqual(response.headers["content-type"], "application/json; charset=utf-8")

    def test_wrong_method_is_405_envelope(self) -> None:
        response = self.client.put("/api/users/register", json={})
        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.json(), {"error": "Method Not Allowed"})
