"""
Shared authentication utilities.

Why:
    Avoid duplicating cookie policy and bearer-token parsing across the auth,
    users and articles routers. Keeping single helpers improves consistency
    and makes testing easier.

Design:
    Cookie and header helpers are pure or touch Starlette request/response
    objects only. `require_provider_user` is the one helper that calls out to
    the provider, to resolve a bearer token to a profile.
"""

from __future__ import annotations

import logging
import os

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from devnotes.identity_access.domain import STATE_COOKIE_NAME, STATE_TTL_SECONDS
from devnotes.identity_access.errors import AuthFlowError, InvalidTokenError, UpstreamFetchError
from devnotes.identity_access.provider import ProviderClient
from devnotes.web.config import load_provider_config

logger = logging.getLogger("devnotes.web")

PRIVATE_NO_STORE = {"Cache-Control": "private, no-store"}


def cookie_opts() -> dict:
    """Return hardened cookie flags, identical in every environment.

    Returns a mapping with keys:
      - secure: True
      - samesite: "lax"  # Allow the provider's top-level redirect to send it
    """
    # "Strict" would suppress the cookie on the cross-site redirect back from
    # the provider and break every callback.
    return {"secure": True, "samesite": "lax"}


def set_state_cookie(response: Response, state: str) -> None:
    opts = cookie_opts()
    response.set_cookie(
        key=STATE_COOKIE_NAME,
        value=state,
        httponly=True,
        secure=opts["secure"],
        samesite=opts["samesite"],
        path="/",
        max_age=STATE_TTL_SECONDS,
    )


def clear_state_cookie(response: Response) -> None:
    """Expire the state cookie so a state value is consumed exactly once."""
    opts = cookie_opts()
    response.set_cookie(
        key=STATE_COOKIE_NAME,
        value="",
        httponly=True,
        secure=opts["secure"],
        samesite=opts["samesite"],
        path="/",
        expires=0,
        max_age=0,
    )


def bearer_token(request: Request) -> str | None:
    """Return the token from `Authorization: Bearer <token>`, if any."""
    raw = request.headers.get("authorization") or ""
    scheme, _, token = raw.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def request_app_base(request: Request) -> str:
    """Derive the browser-facing app base (scheme://host[:port]) from the request.

    Honors X-Forwarded-* only when DEVNOTES_TRUST_PROXY=true.
    """
    trust_proxy = (os.getenv("DEVNOTES_TRUST_PROXY", "false") or "").lower() == "true"
    scheme = (request.url.scheme or "http").lower()
    if request.url.hostname:
        host = f"{request.url.hostname}:{request.url.port}" if request.url.port else request.url.hostname
    else:
        host = request.headers.get("host") or ""
    if trust_proxy:
        xf_proto = (request.headers.get("x-forwarded-proto") or scheme).split(",")[0].strip()
        xf_host = (request.headers.get("x-forwarded-host") or host).split(",")[0].strip()
        scheme = (xf_proto or scheme).lower()
        host = xf_host or host
    return f"{scheme}://{host}"


def require_provider_user(request: Request):
    """Resolve the caller's provider profile from the bearer token.

    Returns `(profile, None)` on success or `(None, JSONResponse)` with 401
    (missing/rejected token), 500 (no client configured) or 502 (provider
    unreachable).
    """
    token = bearer_token(request)
    if not token:
        return None, JSONResponse({"error": "unauthenticated"}, status_code=401, headers=dict(PRIVATE_NO_STORE))
    try:
        client = ProviderClient(load_provider_config(app_base=request_app_base(request)))
        profile = client.fetch_user_profile(token)
    except InvalidTokenError:
        return None, JSONResponse({"error": "unauthenticated"}, status_code=401, headers=dict(PRIVATE_NO_STORE))
    except UpstreamFetchError as exc:
        logger.warning("Provider profile lookup failed: %s", exc.code)
        return None, JSONResponse({"error": "bad_gateway"}, status_code=502, headers=dict(PRIVATE_NO_STORE))
    except AuthFlowError as exc:
        return None, JSONResponse({"error": exc.message}, status_code=exc.status_code, headers=dict(PRIVATE_NO_STORE))
    if not profile.login:
        return None, JSONResponse({"error": "unauthenticated"}, status_code=401, headers=dict(PRIVATE_NO_STORE))
    return profile, None
