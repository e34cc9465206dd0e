# ==============================================================================
# HEALTH ENDPOINT TESTS
# ==============================================================================
# Tests for root, health check and the shared error envelope
# ==============================================================================

import pytest
from httpx import AsyncClient


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.asyncio
    async def test_root_endpoint(self, client: AsyncClient):
        """Test root endpoint returns API info."""
        response = await client.get("/")

        assert response.status_code == 200
        data = response.json()

        assert data["success"] is True
        assert "name" in data
        assert "version" in data
        assert data["health"] == "/health"
        assert data["api"] == "/api"

    @pytest.mark.asyncio
    async def test_health_endpoint(self, client: AsyncClient):
        """Test health endpoint reports a connected database."""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()

        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert "version" in data


class TestRequestHeaders:
    """Tests for headers added by the request logger."""

    @pytest.mark.asyncio
    async def test_request_id_generated(self, client: AsyncClient):
        """Test a request id is generated when none is sent."""
        response = await client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 8
        assert response.headers["X-Response-Time"].endswith("ms")

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client: AsyncClient):
        """Test an incoming request id is reused."""
        response = await client.get("/health", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"


class TestErrorEnvelope:
    """Tests for the error response format."""

    @pytest.mark.asyncio
    async def test_unknown_route(self, client: AsyncClient):
        """Test unknown routes use the error envelope."""
        response = await client.get("/api/does-not-exist")

        assert response.status_code == 404
        data = response.json()
        assert data["success"] is False
        assert data["error"]["code"] == "HTTP_404"

    @pytest.mark.asyncio
    async def test_validation_error_is_400(self, client: AsyncClient):
        """Test request validation failures return 400 with field messages."""
        response = await client.post("/api/auth/signup", json={"email": "not-an-email"})

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"]["code"] == "VALIDATION_ERROR"
        fields = {error["field"] for error in data["errors"]}
        assert {"username", "email", "password"} <= fields
