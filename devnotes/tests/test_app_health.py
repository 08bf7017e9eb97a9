"""App wiring: health endpoint and mounted routes."""
from __future__ import annotations

import httpx
import pytest
from httpx import ASGITransport

pytestmark = pytest.mark.anyio("asyncio")


@pytest.mark.anyio
async def test_health_endpoint_is_private():
    from devnotes.web import main

    async with httpx.AsyncClient(transport=ASGITransport(app=main.app), base_url="http://test") as client:
        r = await client.get("/health")

    assert r.status_code == 200
    assert r.json() == {"status": "healthy"}
    assert r.headers.get("Cache-Control") == "private, no-store"


def test_app_mounts_all_routes():
    from devnotes.web import main

    paths = set(main.app.openapi()["paths"])

    assert {"/api/auth", "/api/callback", "/api/users/logins", "/api/articles", "/health"} <= paths


def test_dotenv_is_not_loaded_under_pytest():
    from devnotes.web import main

    assert main._should_load_dotenv() is False
