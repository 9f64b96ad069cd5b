"""Tests for the global exception handlers and unknown routes."""
from fastapi.testclient import TestClient

from app.core.rate_limiter import RateLimiter
from app.main import create_app


class _ExplodingRateLimiter(RateLimiter):
    def hit(self, key):
        raise RuntimeError("limiter storage exploded")


class TestUnknownEndpoints:
    def test_unknown_path_returns_404_with_available_endpoints(self, client):
        response = client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {
            "error": "Endpoint not found",
            "available": ["/api/send-email", "/api/health"],
        }

    def test_wrong_method_reported_as_not_found(self, client):
        response = client.delete("/api/health")

        assert response.status_code == 404
        assert response.json()["error"] == "Endpoint not found"

    def test_root_is_not_an_endpoint(self, client):
        assert client.get("/").status_code == 404


class TestGlobalExceptionHandler:
    def _client(self, settings, transport):
        app = create_app(settings, transport=transport, rate_limiter=_ExplodingRateLimiter())
        return TestClient(app, raise_server_exceptions=False)

    def test_unhandled_error_returns_generic_500(self, test_settings, transport, jane):
        with self._client(test_settings, transport) as client:
            response = client.post("/api/send-email", json=jane)

        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "message": "Something went wrong on our end",
        }
        assert "exploded" not in response.text
        assert transport.attempts == []

    def test_debug_mode_includes_error_type(self, settings_factory, transport, jane):
        settings = settings_factory(DEBUG=True)
        with self._client(settings, transport) as client:
            response = client.post("/api/send-email", json=jane)

        assert response.status_code == 500
        payload = response.json()
        assert payload["error_type"] == "RuntimeError"
        assert payload["detail"] == "limiter storage exploded"

    def test_unhandled_error_is_logged(self, test_settings, transport, jane, caplog):
        caplog.set_level("ERROR", logger="app.core.errors")
        with self._client(test_settings, transport) as client:
            client.post("/api/send-email", json=jane)

        assert "Unhandled exception on POST /api/send-email" in caplog.text
