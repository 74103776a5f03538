"""Tests for health and info endpoints."""

from datetime import datetime

import pytest
from httpx import AsyncClient

from quotes_api.settings import get_settings


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health endpoint reports status, uptime and environment."""
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()

    assert set(data) == {"status", "timestamp", "uptime", "environment"}
    assert data["status"] == "healthy"
    assert data["uptime"] >= 0
    assert data["environment"] == get_settings().environment
    assert datetime.fromisoformat(data["timestamp"].replace("Z", "+00:00")).tzinfo is not None


@pytest.mark.asyncio
async def test_api_info(client: AsyncClient):
    response = await client.get("/")
    assert response.status_code == 200
    data = response.json()

    assert data["name"] == "Random Quote Generator API"
    assert data["endpoints"]["rest"] == "/api/quotes"
    assert data["endpoints"]["graphql"] == "/graphql"
