"""
Centralized configuration for the content repository used by the login audit.

Intent:
    Provide a single source of truth for repository coordinates, the audit file
    path and the outbound timeouts, with environment-variable overrides.

Behavior:
    - REPO_OWNER / REPO_NAME / REPO_ACCESS_TOKEN identify the repository and the
      server-side token used to write the audit file.
    - AUDIT_LOG_PATH overrides the default `data/user-logins.json`.
    - REPO_BRANCH is optional; the repository default branch is used otherwise.

Permissions:
    Pure configuration; no external calls or privileges required.
"""
from __future__ import annotations

from dataclasses import dataclass
import os

from devnotes.identity_access.domain import DEFAULT_AUDIT_LOG_PATH

DEFAULT_API_BASE_URL = "https://api.github.com"


def _env(name: str) -> str:
    return (os.getenv(name) or "").strip()


def get_upstream_timeout_seconds(default: float = 5.0) -> float:
    """Return the per-call timeout for provider and storage APIs.

    Env:
        UPSTREAM_TIMEOUT_SECONDS – optional override; invalid or non-positive
        values fall back to `default`.
    """
    raw = _env("UPSTREAM_TIMEOUT_SECONDS")
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class AuditLogConfig:
    owner: str
    repo: str
    token: str
    path: str = DEFAULT_AUDIT_LOG_PATH
    branch: str | None = None
    api_base_url: str = DEFAULT_API_BASE_URL

    @property
    def is_configured(self) -> bool:
        return bool(self.owner and self.repo and self.token)


def load_audit_config() -> AuditLogConfig:
    return AuditLogConfig(
        owner=_env("REPO_OWNER"),
        repo=_env("REPO_NAME"),
        token=_env("REPO_ACCESS_TOKEN"),
        path=_env("AUDIT_LOG_PATH") or DEFAULT_AUDIT_LOG_PATH,
        branch=_env("REPO_BRANCH") or None,
        api_base_url=_env("PROVIDER_API_URL") or DEFAULT_API_BASE_URL,
    )


__all__ = [
    "AuditLogConfig",
    "DEFAULT_API_BASE_URL",
    "get_upstream_timeout_seconds",
    "load_audit_config",
]
