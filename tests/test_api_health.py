"""Tests for the service probes."""

from unittest.mock import AsyncMock

from httpx import AsyncClient
from sqlalchemy.exc import OperationalError

from tcgtracker.db.database import get_session
from tcgtracker.main import app


class TestHealthEndpoint:
    async def test_liveness(self, client: AsyncClient) -> None:
        """Liveness probe answers without touching dependencies."""
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestReadyEndpoint:
    async def test_ready_reports_catalog_and_sources(self, client: AsyncClient) -> None:
        response = await client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["database"] == "connected"
        assert data["catalog_cards"] == 0
        assert data["sources"] == ["dummy", "fabdb", "lorcanajson", "pokemon", "scryfall", "swudb"]

    async def test_catalog_count_reflects_imports(self, client: AsyncClient) -> None:
        await client.post("/import/apply", json={"source": "dummy", "set": "BETA"})

        response = await client.get("/ready")

        assert response.json()["catalog_cards"] == 1

    async def test_not_ready_when_database_fails(self, client: AsyncClient) -> None:
        """Readiness returns 503 if the catalog cannot be queried."""
        broken = AsyncMock()
        broken.execute.side_effect = OperationalError("SELECT count(*)", {}, Exception("refused"))

        async def broken_session():
            yield broken

        app.dependency_overrides[get_session] = broken_session

        response = await client.get("/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["database"] == "unavailable"
        assert data["catalog_cards"] is None
