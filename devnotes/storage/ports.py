"""
Content storage port used by the login audit and article publishing.

Keep this small and framework-agnostic so tests can supply simple fakes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


class ContentStoreError(Exception):
    """Reading or writing a document failed for a reason other than a conflict."""

    def __init__(self, code: str, status_code: int | None = None):
        super().__init__(code)
        self.code = code
        self.status_code = status_code


class RevisionConflictError(ContentStoreError):
    """The conditional write was rejected because the revision is stale."""

    def __init__(self, status_code: int | None = None):
        super().__init__("revision_conflict", status_code)


@dataclass(frozen=True)
class StoredDocument:
    content: bytes
    revision: str


class ContentStore(Protocol):
    """Repository-backed document store with optimistic concurrency.

    Intent:
        `compare_and_swap` only succeeds when `expected_revision` matches the
        document's current revision. `None` means "the document must not exist
        yet". A stale revision raises `RevisionConflictError`.
    """

    def read(self, path: str) -> Optional[StoredDocument]: ...

    def compare_and_swap(
        self,
        path: str,
        *,
        content: bytes,
        expected_revision: Optional[str],
        message: str,
    ) -> str: ...


__all__ = ["ContentStore", "ContentStoreError", "RevisionConflictError", "StoredDocument"]
