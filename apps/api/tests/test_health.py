import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from typing import AsyncGenerator
from unittest.mock import patch

from main import app


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
async def test_health_reports_configured_keys(client):
    with patch("routers.health.settings") as mock_settings:
        mock_settings.YOUTUBE_API_KEY = "yt-key"
        mock_settings.OPENAI_API_KEY = "sk-test"
        response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["youtube_api_key"] == "configured"
    assert data["openai_api_key"] == "configured"
    assert "yt-key" not in response.text


@pytest.mark.asyncio
async def test_health_degraded_without_keys(client):
    with patch("routers.health.settings") as mock_settings:
        mock_settings.YOUTUBE_API_KEY = ""
        mock_settings.OPENAI_API_KEY = ""
        response = await client.get("/health")

    data = response.json()
    assert data["status"] == "degraded"
    assert data["youtube_api_key"] == "missing"
    assert data["openai_api_key"] == "missing"


@pytest.mark.asyncio
async def test_readiness_requires_youtube_key(client):
    with patch("routers.health.settings") as mock_settings:
        mock_settings.YOUTUBE_API_KEY = ""
        mock_settings.OPENAI_API_KEY = ""
        response = await client.get("/health/ready")

    assert response.status_code == 503
    assert response.json() == {"ready": False, "missing": ["YOUTUBE_API_KEY"]}


@pytest.mark.asyncio
async def test_liveness(client):
    response = await client.get("/health/live")
    assert response.json() == {"alive": True}
