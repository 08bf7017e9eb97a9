"""
Users API: GET /api/users/logins returns the login audit to CMS admins.

Security:
  - Bearer provider token required (401 otherwise)
  - Caller's login must be in CMS_ADMINS (403 otherwise)
  - Responses are private, no-store
"""
from __future__ import annotations

import json

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport

from devnotes.storage.memory import InMemoryContentStore
from devnotes.storage.ports import ContentStoreError
from devnotes.web import storage_wiring
from devnotes.web.routes.users import users_router
from utils.fake_provider import FakeProvider, install_fake_provider

pytestmark = pytest.mark.anyio("asyncio")

AUDIT_PATH = "data/user-logins.json"
RECORDS = {
    "hubot": {"name": "Hubot", "avatarUrl": "", "loginCount": 2, "lastLogin": "2026-01-05T10:00:00.000Z"},
    "octocat": {"name": "The Octocat", "avatarUrl": "https://a/o.png", "loginCount": 9, "lastLogin": "2026-02-01T08:00:00.000Z"},
    "monalisa": {"name": "Mona", "avatarUrl": "", "loginCount": 1, "lastLogin": "2025-12-24T18:30:00.000Z"},
}


def _app() -> FastAPI:
    app = FastAPI()
    app.include_router(users_router)
    return app


async def _get(path: str, token: str | None = "gho_admin") -> httpx.Response:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    async with httpx.AsyncClient(transport=ASGITransport(app=_app()), base_url="https://devnotes.test") as client:
        return await client.get(path, headers=headers)


@pytest.fixture
def admin_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PROVIDER_CLIENT_ID", "client-123")
    monkeypatch.setenv("CMS_ADMINS", "OctoCat")


@pytest.fixture
def audit_store():
    store = InMemoryContentStore({AUDIT_PATH: json.dumps(RECORDS).encode("utf-8")})
    storage_wiring.set_audit_store(store)
    return store


@pytest.mark.anyio
async def test_requires_bearer_token(monkeypatch, admin_env, audit_store):
    fake = install_fake_provider(monkeypatch, FakeProvider())

    r = await _get("/api/users/logins", token=None)

    assert r.status_code == 401
    assert r.headers.get("Cache-Control") == "private, no-store"
    assert fake.calls == []


@pytest.mark.anyio
async def test_rejected_token_is_401(monkeypatch, admin_env, audit_store):
    install_fake_provider(monkeypatch, FakeProvider(profile_status=401, profile_body={"message": "Bad credentials"}))

    r = await _get("/api/users/logins")

    assert r.status_code == 401


@pytest.mark.anyio
async def test_provider_outage_is_502(monkeypatch, admin_env, audit_store):
    install_fake_provider(monkeypatch, FakeProvider(profile_status=503, profile_body={}))

    r = await _get("/api/users/logins")

    assert r.status_code == 502


@pytest.mark.anyio
async def test_non_admin_is_forbidden(monkeypatch, admin_env, audit_store):
    install_fake_provider(monkeypatch, FakeProvider(profile_body={"login": "hubot", "name": "Hubot"}))

    r = await _get("/api/users/logins")

    assert r.status_code == 403
    assert r.json() == {"error": "forbidden"}


@pytest.mark.anyio
async def test_admin_gets_entries_newest_first(monkeypatch, admin_env, audit_store):
    fake = install_fake_provider(monkeypatch, FakeProvider())

    r = await _get("/api/users/logins")

    assert r.status_code == 200
    assert r.headers.get("Cache-Control") == "private, no-store"
    body = r.json()
    assert [e["login"] for e in body] == ["octocat", "hubot", "monalisa"]
    assert body[0] == {"login": "octocat", **RECORDS["octocat"]}
    assert fake.calls[0][2]["headers"]["Authorization"] == "Bearer gho_admin"


@pytest.mark.anyio
async def test_limit_and_offset_are_clamped(monkeypatch, admin_env, audit_store):
    install_fake_provider(monkeypatch, FakeProvider())

    paged = await _get("/api/users/logins?limit=1&offset=1")
    clamped = await _get("/api/users/logins?limit=0&offset=-5")

    assert [e["login"] for e in paged.json()] == ["hubot"]
    assert [e["login"] for e in clamped.json()] == ["octocat"]


@pytest.mark.anyio
async def test_missing_audit_store_is_503(monkeypatch, admin_env):
    install_fake_provider(monkeypatch, FakeProvider())

    r = await _get("/api/users/logins")

    assert r.status_code == 503
    assert r.json() == {"error": "audit_not_configured"}


@pytest.mark.anyio
async def test_store_failure_is_502(monkeypatch, admin_env):
    class BrokenStore(InMemoryContentStore):
        def read(self, path):
            raise ContentStoreError("read_failed", 500)

    storage_wiring.set_audit_store(BrokenStore())
    install_fake_provider(monkeypatch, FakeProvider())

    r = await _get("/api/users/logins")

    assert r.status_code == 502
    assert r.json() == {"error": "bad_gateway"}
