"""Tests for config API endpoint."""

import pytest
from aiohttp.test_utils import TestClient
from blockstage.config import Config
from blockstage.server import create_app


@pytest.fixture
def client(test_config: Config, aiohttp_client) -> TestClient:
    """Create test client with configured app."""
    app = create_app(test_config)
    return aiohttp_client(app)


class TestGetConfig:
    """Tests for GET /api/config."""

    @pytest.mark.asyncio
    async def test__site_config__returned(self, client) -> None:
        """Return languages, theme CSS and live reload state."""
        test_client = await client
        response = await test_client.get("/api/config")

        assert response.status == 200
        data = await response.json()
        assert [lang["value"] for lang in data["languages"]] == ["en", "fr"]
        assert data["defaultLanguage"] == "en"
        assert data["activeLanguage"] == "en"
        assert ".context__light" in data["themeCss"]
        assert data["liveReloadEnabled"] is False
