"""
In-memory ContentStore for development and tests.

Why: Mirror the conditional-write semantics of the contents API without a
network, so audit and publishing logic can be exercised deterministically.
For production, use `GitHubContentsStore`.
"""
from __future__ import annotations

from typing import Dict, Optional
import hashlib

from .ports import RevisionConflictError, StoredDocument


def _revision(content: bytes) -> str:
    # Same shape as a git blob sha
    header = f"blob {len(content)}\0".encode("ascii")
    return hashlib.sha1(header + content).hexdigest()


class InMemoryContentStore:
    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, StoredDocument] = {}
        self.commits: list[str] = []
        for path, content in (files or {}).items():
            self._data[path] = StoredDocument(content=content, revision=_revision(content))

    def read(self, path: str) -> Optional[StoredDocument]:
        return self._data.get(path)

    def compare_and_swap(
        self,
        path: str,
        *,
        content: bytes,
        expected_revision: Optional[str],
        message: str,
    ) -> str:
        current = self._data.get(path)
        current_rev = current.revision if current else None
        if current_rev != (expected_revision or None):
            raise RevisionConflictError()
        doc = StoredDocument(content=content, revision=_revision(content))
        self._data[path] = doc
        self.commits.append(message)
        return doc.revision


__all__ = ["InMemoryContentStore"]
