"""
Provider OAuth routes (router-only module): authorize redirect and callback.

Why:
    The CMS front end opens `/api/auth` in a popup. The provider redirects the
    popup back to `/api/callback`, which hands the access token to the opener
    window via `postMessage` and closes itself.

Notes:
    - Configuration is read per request; both handlers are stateless apart
      from the `oauth_state` cookie.
    - The CSRF and code checks run before any outbound call.
    - The login audit is best effort and never changes the callback outcome.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
import logging
import secrets

from devnotes.identity_access.audit import AuditResult, record_login
from devnotes.identity_access.domain import STATE_COOKIE_NAME, UserProfile
from devnotes.identity_access.errors import (
    AuthFlowError,
    CsrfMismatchError,
    MissingCodeError,
    UpstreamFetchError,
)
from devnotes.identity_access.provider import ProviderClient
from devnotes.web import storage_wiring
from devnotes.web.auth_utils import (
    PRIVATE_NO_STORE,
    clear_state_cookie,
    request_app_base,
    set_state_cookie,
)
from devnotes.web.components import AuthorizationPopup
from devnotes.web.config import load_provider_config, site_origin


auth_router = APIRouter(tags=["Auth"])  # explicit paths, no prefix
logger = logging.getLogger("devnotes.web.auth")


def _error_response(exc: AuthFlowError, *, clear_state: bool = False) -> JSONResponse:
    resp = JSONResponse({"error": exc.message}, status_code=exc.status_code, headers=dict(PRIVATE_NO_STORE))
    if clear_state:
        clear_state_cookie(resp)
    return resp


def _states_match(state: str | None, cookie_state: str | None) -> bool:
    """Return True only if both values are present and identical byte for byte."""
    if not state or not cookie_state:
        return False
    return secrets.compare_digest(state.encode("utf-8"), cookie_state.encode("utf-8"))


def _audit_login(profile: UserProfile) -> AuditResult | None:
    """Upsert the login audit record; failures are logged and discarded.

    Returns None when no audit repository is configured.
    """
    try:
        store = storage_wiring.get_audit_store()
        path = storage_wiring.get_audit_log_path()
    except Exception as exc:
        logger.warning("Login audit store unavailable: %s", exc.__class__.__name__)
        return AuditResult.failure("store_unavailable")
    if store is None:
        return None
    outcome = record_login(store, path, profile)
    if not outcome.ok:
        logger.warning("Failed to audit login for %s: %s", profile.login, outcome.error)
    return outcome


@auth_router.get("/api/auth")
async def auth_authorize(request: Request):
    """
    Start the provider authorization flow and redirect to the consent screen.

    Behavior:
        - Generates a fresh state with `secrets` and stores it in the
          `oauth_state` cookie (HttpOnly, Secure, SameSite=Lax, Max-Age=600).
        - redirect_uri is `{SITE_URL}/api/callback`; without SITE_URL the
          request's own base URL is used.
        - Responds 500 `{error}` when no client id is configured.
    Permissions:
        Public.
    """
    try:
        cfg = load_provider_config(app_base=request_app_base(request))
    except AuthFlowError as exc:
        logger.error("Authorization redirect refused: %s", exc.message)
        return _error_response(exc)
    state = ProviderClient.generate_state()
    url = ProviderClient(cfg).build_authorization_url(state=state)
    resp = RedirectResponse(url=url, status_code=302, headers=dict(PRIVATE_NO_STORE))
    set_state_cookie(resp, state)
    return resp


@auth_router.get("/api/callback")
async def auth_callback(request: Request, code: str | None = None, state: str | None = None):
    """
    Complete the flow: verify state, exchange the code, fetch the profile.

    Behavior:
        - 400 `Invalid state parameter` unless `state` equals the cookie value.
        - 400 `Authorization code not provided` without `code`.
        - 400 with the provider's description when the token endpoint reports
          an error; 500 `Internal server error` on any other failure.
        - On success, attempts the login audit, then returns the popup page
          posting `{type: 'authorization', token, user}` to the opener.
        - Once the state has matched, every response expires the state cookie;
          a mismatch leaves it untouched.
    Permissions:
        Public; bound to the browser that started the flow via the cookie.
    """
    if not _states_match(state, request.cookies.get(STATE_COOKIE_NAME)):
        # Keep the cookie of a pending login in place
        return _error_response(CsrfMismatchError())
    if not code:
        return _error_response(MissingCodeError(), clear_state=True)

    try:
        cfg = load_provider_config(app_base=request_app_base(request))
        client = ProviderClient(cfg)
        token = client.exchange_code_for_token(code=code)
        profile = client.fetch_user_profile(token.access_token)
    except UpstreamFetchError as exc:
        logger.error("OAuth callback failed: %s", exc.code)
        return _error_response(exc, clear_state=True)
    except AuthFlowError as exc:
        logger.warning("OAuth callback rejected: %s", exc.message)
        return _error_response(exc, clear_state=True)
    except Exception as exc:
        logger.exception("OAuth callback error: %s", exc.__class__.__name__)
        return _error_response(UpstreamFetchError("unexpected_error"), clear_state=True)

    _audit_login(profile)

    page = AuthorizationPopup(token=token.access_token, user=profile.raw, target_origin=site_origin() or "*")
    resp = HTMLResponse(content=page.render(), headers=dict(PRIVATE_NO_STORE))
    clear_state_cookie(resp)
    return resp
