from datetime import datetime

from fastapi.testclient import TestClient

from app.main import create_app


def test_health_reports_ok(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "OK"
    assert payload["message"] == "Email service is running"
    datetime.fromisoformat(payload["timestamp"].replace("Z", "+00:00"))


def test_health_ok_while_client_is_rate_limited(client, jane):
    for _ in range(6):
        client.post("/api/send-email", json=jane)

    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "OK"


def test_health_ok_when_mail_transport_is_failing(
    test_settings, transport_factory, rate_limiter
):
    transport = transport_factory(fail_for={"owner@example.com", "jane@example.com"})
    app = create_app(test_settings, transport=transport, rate_limiter=rate_limiter)

    with TestClient(app) as client:
        response = client.get("/api/health")

    assert response.status_code == 200
    assert transport.attempts == []


def test_health_not_counted_by_rate_limiter(client, rate_limiter):
    for _ in range(10):
        assert client.get("/api/health").status_code == 200

    assert rate_limiter.stats()["counts"] == {}
