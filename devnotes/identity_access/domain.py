"""
Identity domain constants and value objects.

Why:
- Centralize cookie name, state lifetime and the audit record shape so the web
  adapter, the audit service and tests agree on one definition.
- Keep terms aligned with the glossary (AuthorizationState, ProviderToken,
  UserProfile, LoginAuditRecord).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

STATE_COOKIE_NAME = "oauth_state"
STATE_TTL_SECONDS = 600
DEFAULT_AUDIT_LOG_PATH = "data/user-logins.json"


@dataclass(frozen=True)
class ProviderToken:
    access_token: str
    token_type: Optional[str] = None
    scope: Optional[str] = None


@dataclass(frozen=True)
class UserProfile:
    """Provider user profile; `raw` keeps the full JSON for the popup message."""

    login: Optional[str]
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    email: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, body: Dict[str, Any]) -> "UserProfile":
        def _str_or_none(key: str) -> Optional[str]:
            value = body.get(key)
            return str(value) if value else None

        return cls(
            login=_str_or_none("login"),
            name=_str_or_none("name"),
            avatar_url=_str_or_none("avatar_url"),
            email=_str_or_none("email"),
            raw=dict(body),
        )


@dataclass(frozen=True)
class LoginAuditRecord:
    name: str
    avatar_url: str
    login_count: int
    last_login: str

    @classmethod
    def from_json(cls, data: Dict[str, Any] | None) -> Optional["LoginAuditRecord"]:
        if not isinstance(data, dict):
            return None
        try:
            count = int(data.get("loginCount") or 0)
        except (TypeError, ValueError):
            count = 0
        return cls(
            name=str(data.get("name") or ""),
            avatar_url=str(data.get("avatarUrl") or ""),
            login_count=count,
            last_login=str(data.get("lastLogin") or ""),
        )

    def to_json(self) -> Dict[str, Any]:
        # Persisted key names are part of the file contract read by the front end
        return {
            "name": self.name,
            "avatarUrl": self.avatar_url,
            "loginCount": self.login_count,
            "lastLogin": self.last_login,
        }


__all__ = [
    "STATE_COOKIE_NAME",
    "STATE_TTL_SECONDS",
    "DEFAULT_AUDIT_LOG_PATH",
    "ProviderToken",
    "UserProfile",
    "LoginAuditRecord",
]
