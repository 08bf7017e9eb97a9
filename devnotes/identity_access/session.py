"""
Explicit "current user" session context.

Why: Replace a module-level mutable current user with an object that callers
create and pass along. Persistence goes through an injected KeyValueStorage so
the session works the same over browser storage, cookies or memory.

Security: Only the profile fields needed for display are stored; the provider
access token is never written to storage.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional
import json
import logging

from .domain import UserProfile
from .stores import KeyValueStorage

logger = logging.getLogger("devnotes.identity_access.session")

SESSION_STORAGE_KEY = "devnotes_user"


@dataclass(frozen=True)
class SessionUser:
    login: str
    name: str
    avatar_url: str = ""
    email: Optional[str] = None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "SessionUser":
        if not profile.login:
            raise ValueError("profile_without_login")
        return cls(
            login=profile.login,
            name=profile.name or profile.login,
            avatar_url=profile.avatar_url or "",
            email=profile.email,
        )


class UserSession:
    def __init__(self, storage: KeyValueStorage, *, key: str = SESSION_STORAGE_KEY):
        self._storage = storage
        self._key = key
        self._user: Optional[SessionUser] = None

    @property
    def user(self) -> Optional[SessionUser]:
        return self._user

    @property
    def is_signed_in(self) -> bool:
        return self._user is not None

    def restore(self) -> Optional[SessionUser]:
        """Load the user from storage; corrupt entries are dropped."""
        raw = self._storage.get(self._key)
        if not raw:
            self._user = None
            return None
        try:
            data = json.loads(raw)
            self._user = SessionUser(**data)
        except (ValueError, TypeError) as exc:
            logger.warning("Discarding unreadable session entry: %s", exc.__class__.__name__)
            self._storage.remove(self._key)
            self._user = None
        return self._user

    def sign_in(self, user: SessionUser) -> SessionUser:
        self._storage.set(self._key, json.dumps(asdict(user)))
        self._user = user
        return user

    def sign_out(self) -> None:
        self._storage.remove(self._key)
        self._user = None


__all__ = ["SESSION_STORAGE_KEY", "SessionUser", "UserSession"]
