"""
Configuration and startup security checks for the DevNotes auth backend.

Why: Handlers read the provider configuration per request (they behave like
stateless serverless functions), and production deployments must not start
with obviously insecure settings. Local development stays permissive.

Permissions: The caller needs no special privileges. The functions simply read
environment variables; the guard raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import os
from urllib.parse import urlparse

from devnotes.identity_access.errors import ConfigurationError
from devnotes.identity_access.provider import ProviderConfig
from devnotes.storage.config import get_upstream_timeout_seconds

CALLBACK_PATH = "/api/callback"


def _env(name: str, *fallbacks: str) -> str:
    for key in (name, *fallbacks):
        value = (os.getenv(key) or "").strip()
        if value:
            return value
    return ""


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def get_environment() -> str:
    return (os.getenv("DEVNOTES_ENV", "dev") or "dev").strip().lower()


def get_site_url() -> str | None:
    return _env("SITE_URL").rstrip("/") or None


def site_origin() -> str | None:
    """Return scheme://host[:port] of SITE_URL, or None when unset/invalid."""
    site = get_site_url()
    if not site:
        return None
    parsed = urlparse(site)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def load_provider_config(*, app_base: str | None = None) -> ProviderConfig:
    """Build the provider config from the environment.

    `app_base` is the request-derived base URL used for `redirect_uri` when
    SITE_URL is unset. Raises ConfigurationError without a client id.
    """
    client_id = _env("PROVIDER_CLIENT_ID", "GITHUB_CLIENT_ID")
    if not client_id:
        raise ConfigurationError()
    base = get_site_url() or (app_base or "").rstrip("/")
    defaults = ProviderConfig(client_id=client_id, redirect_uri="")
    return ProviderConfig(
        client_id=client_id,
        client_secret=_env("PROVIDER_CLIENT_SECRET", "GITHUB_CLIENT_SECRET") or None,
        redirect_uri=f"{base}{CALLBACK_PATH}",
        scope=_env("PROVIDER_SCOPE") or defaults.scope,
        authorize_url=_env("PROVIDER_AUTHORIZE_URL") or defaults.authorize_url,
        token_url=_env("PROVIDER_TOKEN_URL") or defaults.token_url,
        api_base_url=_env("PROVIDER_API_URL") or defaults.api_base_url,
        timeout_seconds=get_upstream_timeout_seconds(),
    )


def get_admin_logins() -> set[str]:
    """Parse CMS_ADMINS (comma-separated provider logins) into a lowercase set."""
    raw = os.getenv("CMS_ADMINS") or ""
    items = [part.strip().lower() for part in raw.split(",")]
    return {item for item in items if item}


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Checks (prod/stage only):
    - A provider client id and secret must be configured.
    - SITE_URL must be set and use https (the state cookie is `Secure`).
    """
    if not _is_prod_like(get_environment()):
        return  # dev/test remain permissive

    if not _env("PROVIDER_CLIENT_ID", "GITHUB_CLIENT_ID"):
        raise SystemExit("Refusing to start: PROVIDER_CLIENT_ID is unset in production.")

    secret = _env("PROVIDER_CLIENT_SECRET", "GITHUB_CLIENT_SECRET")
    if not secret or secret.upper().startswith("CHANGE_ME"):
        raise SystemExit(
            "Refusing to start: PROVIDER_CLIENT_SECRET is unset or a placeholder in production."
        )

    site = get_site_url() or ""
    if not site.lower().startswith("https://"):
        raise SystemExit("Refusing to start: SITE_URL must be set and use https in production.")
