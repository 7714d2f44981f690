"""Tests for health check endpoints."""

from httpx import AsyncClient


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "CardLedger"

    async def test_ready_without_prices(self, client: AsyncClient) -> None:
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ready",
            "service": "CardLedger",
            "database": "connected",
            "latest_price_date": None,
        }
