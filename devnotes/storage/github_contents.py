"""
GitHub Contents API adapter for the ContentStore port.

Intent:
    Read and conditionally overwrite single files in a repository. The file's
    blob `sha` serves as the revision marker, so a PUT with a stale `sha` is
    rejected by GitHub instead of silently overwriting a concurrent update.

Security & Safety:
    - Never logs the access token; only status codes and paths.
    - Every request carries a (connect, read) timeout.
"""
from __future__ import annotations

import base64
import logging
from typing import Optional
from urllib.parse import quote

import requests

from .ports import ContentStoreError, RevisionConflictError, StoredDocument

_log = logging.getLogger("devnotes.storage")

USER_AGENT = "devnotes-cms-audit"
# GitHub answers 409 for a sha mismatch and 422 when `sha` is missing for an
# existing file (or present for a missing one).
_CONFLICT_STATUSES = frozenset({409, 422})


class GitHubContentsStore:
    def __init__(
        self,
        *,
        owner: str,
        repo: str,
        token: str,
        branch: str | None = None,
        api_base_url: str = "https://api.github.com",
        timeout_seconds: float = 5.0,
    ) -> None:
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self._token = token
        self._base = api_base_url.rstrip("/")
        self._timeout = (min(3.0, timeout_seconds), timeout_seconds)

    def _url(self, path: str) -> str:
        return f"{self._base}/repos/{self.owner}/{self.repo}/contents/{quote(path.lstrip('/'))}"

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }

    def read(self, path: str) -> Optional[StoredDocument]:
        params = {"ref": self.branch} if self.branch else None
        try:
            resp = requests.get(self._url(path), headers=self._headers(), params=params, timeout=self._timeout)
        except requests.RequestException as exc:
            raise ContentStoreError("read_failed") from exc
        _log.debug("GET contents path=%s status=%s", path, resp.status_code)
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise ContentStoreError("read_failed", resp.status_code)
        try:
            body = resp.json()
            encoding = body.get("encoding")
            raw = body.get("content") or ""
            size = int(body.get("size") or 0)
            # GitHub wraps base64 at 60 columns; b64decode drops the newlines
            content = base64.b64decode(raw)
            sha = str(body["sha"])
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise ContentStoreError("read_malformed", resp.status_code) from exc
        # Files over 1 MB arrive with encoding "none" and empty content but a valid sha
        if encoding not in (None, "base64"):
            raise ContentStoreError("read_unsupported_encoding", resp.status_code)
        if not content and size > 0:
            raise ContentStoreError("read_truncated", resp.status_code)
        return StoredDocument(content=content, revision=sha)

    def compare_and_swap(
        self,
        path: str,
        *,
        content: bytes,
        expected_revision: Optional[str],
        message: str,
    ) -> str:
        payload = {
            "message": message,
            "content": base64.b64encode(content).decode("ascii"),
        }
        if expected_revision:
            payload["sha"] = expected_revision
        if self.branch:
            payload["branch"] = self.branch
        headers = {**self._headers(), "Content-Type": "application/json"}
        try:
            resp = requests.put(self._url(path), headers=headers, json=payload, timeout=self._timeout)
        except requests.RequestException as exc:
            raise ContentStoreError("write_failed") from exc
        _log.debug("PUT contents path=%s status=%s", path, resp.status_code)
        if resp.status_code in _CONFLICT_STATUSES:
            raise RevisionConflictError(resp.status_code)
        if resp.status_code not in (200, 201):
            raise ContentStoreError("write_failed", resp.status_code)
        try:
            return str(resp.json()["content"]["sha"])
        except (ValueError, KeyError, TypeError):
            # The write succeeded; a missing sha only affects follow-up writes
            return ""


__all__ = ["GitHubContentsStore"]
