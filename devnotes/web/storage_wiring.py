"""
Shared helper for wiring content-store adapters.

Why:
    Handlers read configuration per request, so the adapter is built lazily
    from the environment each time. Tests (and local development without a
    repository) inject an in-memory store through `set_audit_store`.

Security:
    The audit store uses REPO_ACCESS_TOKEN (server-side only). Publishing uses
    the caller's own provider token so repository permissions are enforced by
    the provider, not by this service.
"""
from __future__ import annotations

import logging
from typing import Optional

from devnotes.storage.config import get_upstream_timeout_seconds, load_audit_config
from devnotes.storage.github_contents import GitHubContentsStore
from devnotes.storage.ports import ContentStore

logger = logging.getLogger("devnotes.web")

_AUDIT_STORE: Optional[ContentStore] = None
_REPO_STORE: Optional[ContentStore] = None


def set_audit_store(store: Optional[ContentStore]) -> None:
    """Inject a fixed audit store (tests/dev); None restores env-based wiring."""
    global _AUDIT_STORE
    _AUDIT_STORE = store


def set_repo_store(store: Optional[ContentStore]) -> None:
    """Inject a fixed publishing store (tests/dev); None restores env-based wiring."""
    global _REPO_STORE
    _REPO_STORE = store


def get_audit_store() -> Optional[ContentStore]:
    """Return the audit store, or None when the repository is not configured."""
    if _AUDIT_STORE is not None:
        return _AUDIT_STORE
    cfg = load_audit_config()
    if not cfg.is_configured:
        logger.debug("Login audit disabled: REPO_OWNER/REPO_NAME/REPO_ACCESS_TOKEN not set")
        return None
    return GitHubContentsStore(
        owner=cfg.owner,
        repo=cfg.repo,
        token=cfg.token,
        branch=cfg.branch,
        api_base_url=cfg.api_base_url,
        timeout_seconds=get_upstream_timeout_seconds(),
    )


def get_repo_store(user_token: str) -> Optional[ContentStore]:
    """Return a store acting with the caller's provider token."""
    if _REPO_STORE is not None:
        return _REPO_STORE
    cfg = load_audit_config()
    if not (cfg.owner and cfg.repo):
        return None
    return GitHubContentsStore(
        owner=cfg.owner,
        repo=cfg.repo,
        token=user_token,
        branch=cfg.branch,
        api_base_url=cfg.api_base_url,
        timeout_seconds=get_upstream_timeout_seconds(),
    )


def get_audit_log_path() -> str:
    return load_audit_config().path


__all__ = [
    "get_audit_log_path",
    "get_audit_store",
    "get_repo_store",
    "set_audit_store",
    "set_repo_store",
]
