# ==============================================================================
# RATE LIMITER TESTS
# ==============================================================================

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from storefront.core.settings import settings
from storefront.middleware.rate_limiter import RateLimitMiddleware


@pytest.fixture
def limited_app(monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)

    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, requests_limit=2, window_seconds=60)

    @app.get("/ping")
    async def ping():
        return {"pong": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


async def get(app, path, **headers):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.get(path, headers=headers)


class TestRateLimiter:
    """Tests for the per-IP token bucket."""

    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self, limited_app):
        """Test requests within the bucket carry rate headers."""
        first = await get(limited_app, "/ping")
        second = await get(limited_app, "/ping")

        assert first.status_code == 200
        assert first.headers["X-RateLimit-Limit"] == "2"
        assert first.headers["X-RateLimit-Remaining"] == "1"
        assert second.headers["X-RateLimit-Remaining"] == "0"

    @pytest.mark.asyncio
    async def test_rejects_over_limit(self, limited_app):
        """Test the third request gets the 429 envelope."""
        for _ in range(2):
            await get(limited_app, "/ping")

        response = await get(limited_app, "/ping")

        assert response.status_code == 429
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "RATE_LIMIT_EXCEEDED"
        assert int(response.headers["Retry-After"]) >= 1
        assert response.headers["X-RateLimit-Remaining"] == "0"

    @pytest.mark.asyncio
    async def test_buckets_per_forwarded_ip(self, limited_app):
        """Test clients behind a proxy get separate buckets."""
        for _ in range(2):
            await get(limited_app, "/ping", **{"X-Forwarded-For": "10.0.0.1, 172.16.0.1"})

        blocked = await get(limited_app, "/ping", **{"X-Forwarded-For": "10.0.0.1"})
        other = await get(limited_app, "/ping", **{"X-Forwarded-For": "10.0.0.2"})

        assert blocked.status_code == 429
        assert other.status_code == 200

    @pytest.mark.asyncio
    async def test_exempt_paths(self, limited_app):
        """Test health checks are never throttled."""
        for _ in range(5):
            response = await get(limited_app, "/health")
            assert response.status_code == 200
        assert "X-RateLimit-Limit" not in response.headers

    @pytest.mark.asyncio
    async def test_disabled(self, limited_app, monkeypatch):
        """Test the limiter can be switched off."""
        monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", False)

        for _ in range(5):
            response = await get(limited_app, "/ping")
            assert response.status_code == 200


class TestTokenBucket:
    """Tests for bucket refill arithmetic."""

    def test_refills_over_time(self, monkeypatch):
        """Test a drained bucket refills at limit/window tokens per second."""
        clock = [1000.0]
        monkeypatch.setattr("storefront.middleware.rate_limiter.time.monotonic", lambda: clock[0])
        limiter = RateLimitMiddleware(app=None, requests_limit=10, window_seconds=10)

        for _ in range(10):
            assert limiter._take("client")[0] is True
        allowed, remaining, retry = limiter._take("client")
        assert allowed is False
        assert retry == 1

        clock[0] += 3
        allowed, remaining, _ = limiter._take("client")
        assert allowed is True
        assert remaining == 2
