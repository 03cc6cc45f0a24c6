"""
tests/api/test_health.py

Smoke tests for the /health endpoint: the app starts, the route answers,
and the body reports the version and the search index state.
"""

from fastapi.testclient import TestClient


class TestHealth:
    """Tests for GET /health."""

    def test_health_returns_200(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_status_is_ok(self, client: TestClient) -> None:
        assert client.get("/health").json()["status"] == "ok"

    def test_health_version_is_string(self, client: TestClient) -> None:
        version = client.get("/health").json()["version"]
        assert isinstance(version, str)
        assert len(version) > 0

    def test_health_reports_search_index_state(self, client: TestClient) -> None:
        """The index is connected lazily, so health never forces a connection."""
        state = client.get("/health").json()["searchIndex"]
        assert state in ("pending", "active", "disabled")

    def test_unknown_route_uses_error_envelope(self, client: TestClient) -> None:
        response = client.get("/does-not-exist")
        assert response.status_code == 404
        assert response.json()["success"] is False
