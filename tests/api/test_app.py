"""
Tests for application assembly.

Checks that every router is mounted under /api/v1 without starting the
lifespan (which would build provider clients).
"""

from fastapi.testclient import TestClient

from vault_rag.api.main import create_app


class TestCreateApp:
    """Test suite for create_app."""

    def test_routes_are_versioned(self):
        """All public routes live under /api/v1."""
        app = create_app()

        paths = {route.path for route in app.routes if route.path.startswith("/api/")}

        assert "/api/v1/health" in paths
        assert "/api/v1/health/db" in paths
        assert "/api/v1/vaults/{vault_id}/chat" in paths
        assert "/api/v1/vaults/{vault_id}/chat/history" in paths
        assert "/api/v1/vaults/{vault_id}/index" in paths
        assert "/api/v1/vaults/{vault_id}/items/{source_type}/{source_id}/index" in paths

    def test_health_responds_through_middleware(self):
        """Requests pass the correlation middleware and get a correlation id back."""
        client = TestClient(create_app())

        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.headers.get("X-Correlation-ID")
