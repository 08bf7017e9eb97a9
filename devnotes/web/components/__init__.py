# DevNotes Component System
# Pure Python Components for server-rendered HTML

from .base import Component
from .auth_popup import AuthorizationPopup

__all__ = [
    "Component",
    "AuthorizationPopup",
]
