"""Tests for health check endpoints."""

import pytest
from httpx import AsyncClient

from core.config import settings


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_returns_200(self, client: AsyncClient) -> None:
        """Test that health endpoint returns 200 OK without authentication."""
        response = await client.get("/health")

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_health_returns_correct_structure(self, client: AsyncClient) -> None:
        """Test that health endpoint returns expected structure."""
        response = await client.get("/health")
        data = response.json()

        assert data["status"] == "healthy"
        assert data["service"] == settings.app_name
        assert data["version"] == "1.0.0"
        assert "timestamp" in data
        assert "environment" in data

    @pytest.mark.asyncio
    async def test_detailed_health_checks_database(self, client: AsyncClient) -> None:
        """The detailed check runs a query against the (test) database."""
        response = await client.get("/health/detailed")
        data = response.json()

        assert response.status_code == 200
        assert data["database"] == "healthy"
        assert data["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_responses_carry_request_id_and_security_headers(
        self, client: AsyncClient
    ) -> None:
        response = await client.get("/health", headers={"X-Request-ID": "health-check-1"})

        assert response.headers["x-request-id"] == "health-check-1"
        assert response.headers["x-content-type-options"] == "nosniff"
