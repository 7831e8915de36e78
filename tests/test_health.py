"""
tests/test_health.py -- Integration tests for GET /api/v1/health.

Covers:
  - 200 response with status, version, and active_sessions fields
  - active_sessions follows the session registry
"""

from __future__ import annotations

from api.main import __version__


def test_health_returns_200(api_client):
    client, _, _ = api_client
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["version"] == __version__
    assert isinstance(data["active_sessions"], int)


def test_health_counts_live_sessions(api_client):
    """Mounting a screen adds one session, discarding it removes it again."""
    client, _, registry = api_client
    before = client.get("/api/v1/health").json()["active_sessions"]
    assert before == len(registry)

    sid = client.post("/api/v1/forms/login").json()["session_id"]
    assert client.get("/api/v1/health").json()["active_sessions"] == before + 1

    client.delete(f"/api/v1/forms/sessions/{sid}")
    assert client.get("/api/v1/health").json()["active_sessions"] == before


def test_untrusted_host_rejected(api_client):
    client, _, _ = api_client
    resp = client.get("/api/v1/health", headers={"host": "evil.example.com"})
    assert resp.status_code == 400
