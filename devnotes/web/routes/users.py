"""
Users API routes: read-only view of the login audit for CMS admins.

Why:
    Admins want to see who signed in to the CMS, how often and when. The data
    is the same JSON document the OAuth callback maintains in the content repo.
"""
from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
import logging

from devnotes.identity_access.audit import list_logins
from devnotes.identity_access.errors import AuditUpsertError
from devnotes.storage.ports import ContentStoreError
from devnotes.web import storage_wiring
from devnotes.web.auth_utils import PRIVATE_NO_STORE, require_provider_user
from devnotes.web.config import get_admin_logins


users_router = APIRouter(tags=["Users"])  # explicit path below
logger = logging.getLogger("devnotes.web.users")


def _private_response(body, *, status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=dict(PRIVATE_NO_STORE))


@users_router.get("/api/users/logins")
async def users_logins(request: Request, limit: int = 100, offset: int = 0):
    """List login audit entries, newest login first (admins only).

    Validation:
        - `limit` clamped to 1..500, `offset` to >= 0

    Permissions:
        Bearer provider token whose login is listed in CMS_ADMINS.
    """
    profile, error = require_provider_user(request)
    if error:
        return error
    if (profile.login or "").lower() not in get_admin_logins():
        return _private_response({"error": "forbidden"}, status_code=403)

    store = storage_wiring.get_audit_store()
    if store is None:
        return _private_response({"error": "audit_not_configured"}, status_code=503)
    try:
        entries = list_logins(store, storage_wiring.get_audit_log_path())
    except (ContentStoreError, AuditUpsertError) as exc:
        logger.warning("Login audit read failed: %s", exc.code)
        return _private_response({"error": "bad_gateway"}, status_code=502)

    limit = max(1, min(500, limit))
    offset = max(0, offset)
    return _private_response(entries[offset: offset + limit])
