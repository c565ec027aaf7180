"""Unit tests for middleware."""

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware


def _create_app_with_middleware() -> FastAPI:
    """Create a minimal FastAPI app with the application's middleware stack."""
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/test")
    async def _(request: Request):
        return {"request_id": request.state.request_id}

    @app.get("/framed")
    async def _framed():
        from fastapi.responses import JSONResponse

        return JSONResponse({"ok": True}, headers={"X-Frame-Options": "SAMEORIGIN"})

    return app


@pytest.fixture
async def client():
    transport = ASGITransport(app=_create_app_with_middleware())
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class TestSecurityHeadersMiddleware:
    """Tests for SecurityHeadersMiddleware."""

    @pytest.mark.asyncio
    async def test_adds_standard_headers(self, client: AsyncClient):
        response = await client.get("/test")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert response.headers["referrer-policy"] == "strict-origin-when-cross-origin"

    @pytest.mark.asyncio
    async def test_no_hsts_outside_production(self, client: AsyncClient):
        response = await client.get("/test")

        assert "strict-transport-security" not in response.headers

    @pytest.mark.asyncio
    async def test_keeps_header_set_by_endpoint(self, client: AsyncClient):
        response = await client.get("/framed")

        assert response.headers["x-frame-options"] == "SAMEORIGIN"


class TestRequestIDMiddleware:
    """Tests for RequestIDMiddleware."""

    @pytest.mark.asyncio
    async def test_generates_request_id_when_not_provided(self, client: AsyncClient):
        r1 = await client.get("/test")
        r2 = await client.get("/test")

        assert r1.headers["x-request-id"]
        assert r1.headers["x-request-id"] != r2.headers["x-request-id"]

    @pytest.mark.asyncio
    async def test_propagates_existing_request_id(self, client: AsyncClient):
        response = await client.get("/test", headers={"X-Request-ID": "custom-req-123"})

        assert response.headers["x-request-id"] == "custom-req-123"
        assert response.json()["request_id"] == "custom-req-123"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", ["has spaces", "x" * 129, "semi;colon"])
    async def test_replaces_malformed_request_id(self, client: AsyncClient, bad_id: str):
        response = await client.get("/test", headers={"X-Request-ID": bad_id})

        assert response.headers["x-request-id"] != bad_id
        assert len(response.headers["x-request-id"]) == 36
