"""
Login audit: keep a per-user login record in a JSON file of the content repo.

Why:
    Editors want to see who signed in to the CMS and how often, without a
    database. The record lives next to the content and is updated on every
    successful OAuth callback.

Behavior:
    - Read-modify-write through the ContentStore port. The write is a
      compare-and-swap on the revision read earlier, so two concurrent logins
      cannot silently overwrite each other; the loser gets a conflict.
    - Best effort: `record_login` never raises. It returns an `AuditResult`
      whose failure variant the caller logs and discards. No retries.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
import json
import logging

from devnotes.storage.ports import ContentStore, ContentStoreError, RevisionConflictError

from .domain import LoginAuditRecord, UserProfile
from .errors import AuditUpsertError

logger = logging.getLogger("devnotes.audit")


def format_timestamp(now: datetime) -> str:
    """Return ISO-8601 UTC with millisecond precision and a `Z` suffix."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class AuditResult:
    ok: bool
    record: Optional[LoginAuditRecord] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, record: LoginAuditRecord) -> "AuditResult":
        return cls(ok=True, record=record)

    @classmethod
    def failure(cls, error: str) -> "AuditResult":
        return cls(ok=False, error=error)


def apply_login(records: Dict[str, Any], profile: UserProfile, now: datetime) -> Dict[str, Any]:
    """Return a copy of `records` with the profile's login record updated.

    Missing provider fields fall back to the previous values; `loginCount`
    increments by one and `lastLogin` is overwritten. Other keys are kept.
    """
    login = profile.login
    if not login:
        raise AuditUpsertError("missing_login")
    previous = LoginAuditRecord.from_json(records.get(login))
    updated = LoginAuditRecord(
        name=profile.name or (previous.name if previous else "") or login,
        avatar_url=profile.avatar_url or (previous.avatar_url if previous else "") or "",
        login_count=(previous.login_count if previous else 0) + 1,
        last_login=format_timestamp(now),
    )
    merged = dict(records)
    merged[login] = updated.to_json()
    return merged


def _load(store: ContentStore, path: str) -> Tuple[Dict[str, Any], Optional[str]]:
    doc = store.read(path)
    if doc is None:
        return {}, None
    try:
        data = json.loads(doc.content.decode("utf-8") or "{}")
    except (UnicodeDecodeError, ValueError) as exc:
        raise AuditUpsertError("audit_file_malformed") from exc
    if not isinstance(data, dict):
        raise AuditUpsertError("audit_file_malformed")
    return data, doc.revision


def _dump(records: Dict[str, Any]) -> bytes:
    return json.dumps(records, indent=2, ensure_ascii=False).encode("utf-8")


def record_login(
    store: ContentStore,
    path: str,
    profile: UserProfile,
    now: Optional[datetime] = None,
) -> AuditResult:
    """Upsert the login record for `profile` and report the outcome."""
    now = now or datetime.now(timezone.utc)
    try:
        records, revision = _load(store, path)
        updated = apply_login(records, profile, now)
        store.compare_and_swap(
            path,
            content=_dump(updated),
            expected_revision=revision,
            message=f"chore(cms): update login for {profile.login}",
        )
    except AuditUpsertError as exc:
        return AuditResult.failure(exc.code)
    except RevisionConflictError:
        return AuditResult.failure("revision_conflict")
    except ContentStoreError as exc:
        return AuditResult.failure(exc.code)
    except Exception as exc:
        # Adapter bugs are reported like any other failure
        logger.exception("Unexpected audit failure: %s", exc.__class__.__name__)
        return AuditResult.failure("unexpected_error")
    record = LoginAuditRecord.from_json(updated[profile.login])
    return AuditResult.success(record)  # type: ignore[arg-type]


def list_logins(store: ContentStore, path: str) -> List[Dict[str, Any]]:
    """Return audit entries as a list sorted by `lastLogin` (newest first).

    Raises ContentStoreError / AuditUpsertError; callers decide the status.
    """
    records, _ = _load(store, path)
    entries: List[Dict[str, Any]] = []
    for login, raw in records.items():
        rec = LoginAuditRecord.from_json(raw)
        if rec is None:
            continue
        entries.append({"login": login, **rec.to_json()})
    entries.sort(key=lambda e: e["lastLogin"], reverse=True)
    return entries


__all__ = ["AuditResult", "apply_login", "format_timestamp", "list_logins", "record_login"]
