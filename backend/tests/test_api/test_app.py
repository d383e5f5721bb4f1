"""Tests for application wiring — health endpoints and the error envelope."""

from httpx import AsyncClient

from app.billing.stripe_client import StripeGateway
from app.config import Settings
from app.errors import NotFoundError, QuotaExceededError, error_body
from app.main import create_app


class TestHealth:
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_root(self, client: AsyncClient):
        response = await client.get("/")
        assert response.json()["docs"] == "/docs"


class TestCreateApp:
    async def test_collaborators_on_state(self):
        settings = Settings(database_url="sqlite+aiosqlite:///:memory:", stripe_webhook_secret="whsec_x")
        app = create_app(settings)
        try:
            assert isinstance(app.state.stripe, StripeGateway)
            assert app.state.settings is settings
            assert app.state.session_factory is not None
        finally:
            await app.state.engine.dispose()


class TestSettings:
    def test_bind_address_is_not_a_setting(self):
        # uvicorn owns --host/--port
        assert "host" not in Settings.model_fields
        assert "port" not in Settings.model_fields


class TestErrorEnvelope:
    def test_body_without_details(self):
        assert error_body(NotFoundError("Project not found").message) == {"error": "Project not found"}

    def test_body_with_details(self):
        err = QuotaExceededError(details={"limit": 3})
        assert error_body(err.message, err.details) == {
            "error": "Monthly upload limit reached",
            "details": {"limit": 3},
        }

    async def test_unknown_route_is_404(self, client: AsyncClient):
        response = await client.get("/api/v1/nope")
        assert response.status_code == 404
