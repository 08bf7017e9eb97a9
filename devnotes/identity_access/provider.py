"""
Minimal OAuth client for the source-control provider (GitHub by default).

Why: Keep web framework independent logic in a separate module. The web
adapter (FastAPI) calls into this client to build the authorization URL,
exchange the authorization code for an access token and fetch the profile.

Security: The state value comes from `secrets`; the caller stores it in an
HTTP-only cookie and compares it on the callback. Every outbound call carries a
timeout so a stalled provider cannot hold the request open.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict
import secrets
from urllib.parse import urlencode

# Small indirection to ease monkeypatching in tests
import requests as http

from .domain import ProviderToken, UserProfile
from .errors import InvalidTokenError, ProviderError, UpstreamFetchError

DEFAULT_TIMEOUT_SECONDS = 5.0
USER_AGENT = "devnotes-cms-oauth"


def http_post(url: str, json: Dict[str, str], headers: Dict[str, str], timeout: float = DEFAULT_TIMEOUT_SECONDS):
    return http.post(url, json=json, headers=headers, timeout=timeout)


def http_get(url: str, headers: Dict[str, str], timeout: float = DEFAULT_TIMEOUT_SECONDS):
    return http.get(url, headers=headers, timeout=timeout)


@dataclass(frozen=True)
class ProviderConfig:
    client_id: str
    redirect_uri: str  # e.g., https://devnotes.example/api/callback
    client_secret: str | None = None
    scope: str = "repo"
    authorize_url: str = "https://github.com/login/oauth/authorize"
    token_url: str = "https://github.com/login/oauth/access_token"
    api_base_url: str = "https://api.github.com"
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def user_endpoint(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/user"


class ProviderClient:
    def __init__(self, config: ProviderConfig):
        self.cfg = config

    @staticmethod
    def generate_state() -> str:
        """Return an unpredictable URL-safe anti-CSRF token."""
        return secrets.token_urlsafe(24)

    def build_authorization_url(self, *, state: str) -> str:
        """Return the provider authorization URL for the configured client.

        Parameters
        - state: Opaque anti-CSRF token, echoed back on the callback
        """
        params = {
            "client_id": self.cfg.client_id,
            "redirect_uri": self.cfg.redirect_uri,
            "scope": self.cfg.scope,
            "state": state,
        }
        return f"{self.cfg.authorize_url}?{urlencode(params)}"

    def exchange_code_for_token(self, *, code: str) -> ProviderToken:
        """Exchange the authorization code for an access token.

        Raises ProviderError when the provider reports an error in the body,
        UpstreamFetchError when the endpoint is unreachable or not JSON.
        """
        payload = {
            "client_id": self.cfg.client_id,
            "client_secret": self.cfg.client_secret or "",
            "code": code,
        }
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        try:
            resp = http_post(self.cfg.token_url, json=payload, headers=headers, timeout=self.cfg.timeout_seconds)
            body = resp.json()
        except (http.RequestException, ValueError) as exc:
            raise UpstreamFetchError("token_exchange_failed") from exc
        if not isinstance(body, dict):
            raise UpstreamFetchError("token_exchange_malformed")
        if body.get("error"):
            raise ProviderError(body.get("error_description") or None)
        access_token = body.get("access_token")
        if not access_token or not isinstance(access_token, str):
            raise ProviderError()
        return ProviderToken(
            access_token=access_token,
            token_type=body.get("token_type"),
            scope=body.get("scope"),
        )

    def fetch_user_profile(self, access_token: str) -> UserProfile:
        """Fetch the authenticated user's profile with the bearer token."""
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }
        try:
            resp = http_get(self.cfg.user_endpoint, headers=headers, timeout=self.cfg.timeout_seconds)
        except http.RequestException as exc:
            raise UpstreamFetchError("profile_fetch_failed") from exc
        if resp.status_code == 401:
            raise InvalidTokenError()
        if resp.status_code != 200:
            raise UpstreamFetchError("profile_fetch_failed")
        try:
            body = resp.json()
        except ValueError as exc:
            raise UpstreamFetchError("profile_malformed") from exc
        if not isinstance(body, dict):
            raise UpstreamFetchError("profile_malformed")
        return UserProfile.from_api(body)
