"""Tests for the CORS policy and response security headers."""
from app.core.config import Settings

ALLOWED_ORIGIN = "http://localhost:3000"


class TestCorsPolicy:
    """Verify CORS middleware uses explicit origins/methods/headers, not wildcards."""

    def test_preflight_allowed_origin(self, client):
        resp = client.request(
            "OPTIONS",
            "/api/send-email",
            headers={
                "Origin": ALLOWED_ORIGIN,
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert resp.status_code in (200, 204), f"Preflight failed: {resp.status_code}"
        assert resp.headers["access-control-allow-origin"] == ALLOWED_ORIGIN
        assert resp.headers.get("access-control-allow-credentials") == "true"

    def test_preflight_disallowed_origin(self, client):
        resp = client.request(
            "OPTIONS",
            "/api/send-email",
            headers={
                "Origin": "http://malicious.example",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert resp.status_code == 400
        assert "access-control-allow-origin" not in resp.headers

    def test_preflight_disallowed_method(self, client):
        resp = client.request(
            "OPTIONS",
            "/api/send-email",
            headers={
                "Origin": ALLOWED_ORIGIN,
                "Access-Control-Request-Method": "DELETE",
            },
        )
        assert resp.status_code == 400

    def test_expose_headers_present(self, client, jane):
        resp = client.post(
            "/api/send-email", json=jane, headers={"Origin": ALLOWED_ORIGIN}
        )
        assert resp.headers["access-control-allow-origin"] == ALLOWED_ORIGIN
        expose = resp.headers.get("access-control-expose-headers", "").lower()
        assert "x-request-id" in expose
        assert "x-ratelimit-remaining" in expose

    def test_no_wildcards_in_config(self):
        settings = Settings(_env_file=None)

        assert "*" not in settings.ALLOWED_ORIGINS
        assert "*" not in settings.ALLOWED_METHODS
        assert "*" not in settings.ALLOWED_HEADERS

    def test_empty_origins_fall_back_to_local_dev(self):
        settings = Settings(_env_file=None, ALLOWED_ORIGINS=[])

        assert settings.ALLOWED_ORIGINS == [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]


class TestSecurityHeaders:
    def test_headers_on_api_response(self, client):
        resp = client.get("/api/health")

        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert "default-src 'none'" in resp.headers["Content-Security-Policy"]
        assert resp.headers["Referrer-Policy"] == "no-referrer"
        assert "Strict-Transport-Security" not in resp.headers

    def test_hsts_over_https(self, app):
        from fastapi.testclient import TestClient

        with TestClient(app, base_url="https://testserver") as client:
            resp = client.get("/api/health")

        assert "max-age=31536000" in resp.headers["Strict-Transport-Security"]

    def test_headers_on_not_found(self, client):
        resp = client.get("/api/nope")

        assert resp.status_code == 404
        assert resp.headers["X-Content-Type-Options"] == "nosniff"


class TestRequestId:
    def test_request_id_generated(self, client):
        resp = client.get("/api/health")

        assert resp.headers["X-Request-ID"]

    def test_request_id_preserved(self, client):
        resp = client.get("/api/health", headers={"X-Request-ID": "trace-123"})

        assert resp.headers["X-Request-ID"] == "trace-123"
