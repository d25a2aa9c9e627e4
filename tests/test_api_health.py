"""Tests for health check endpoints."""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from nfcforge.config import settings
from nfcforge.db.database import get_session_factory
from nfcforge.main import app


class TestHealthEndpoint:
    async def test_health_returns_healthy(self, client: AsyncClient) -> None:
        """Liveness probe returns healthy."""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == settings.app_name

    async def test_health_no_store_check(self, client: AsyncClient) -> None:
        """Health endpoint does not report the order store."""
        response = await client.get("/health")

        assert "order_store" not in response.json()


class TestReadyEndpoint:
    async def test_ready_reports_order_store(self, client: AsyncClient) -> None:
        """Readiness probe reads the orders table."""
        response = await client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["order_store"] == "available"
        assert data["stored_orders"] == 0

    async def test_ready_counts_designer_sessions(self, client: AsyncClient) -> None:
        await client.post("/designs")
        await client.post("/designs")

        data = (await client.get("/ready")).json()

        assert data["open_design_sessions"] == 2

    async def test_ready_reports_backends(self, client: AsyncClient, monkeypatch) -> None:
        monkeypatch.setattr(settings, "email_service_url", "")
        monkeypatch.setattr(settings, "payment_api_key", "")

        data = (await client.get("/ready")).json()

        assert data["notifications"] == "log"
        assert data["payments"] == "not configured"

    async def test_ready_returns_503_without_orders_table(self, client: AsyncClient) -> None:
        """Readiness probe reports 503 when the orders table cannot be read."""
        engine = create_async_engine("sqlite+aiosqlite:///:memory:")
        empty_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        app.dependency_overrides[get_session_factory] = lambda: empty_factory
        try:
            response = await client.get("/ready")
        finally:
            await engine.dispose()

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not ready"
        assert data["order_store"] == "unavailable"
        assert data["stored_orders"] is None
