"""
Key/value storage for client session state.

Why: The session context must not own its persistence. Callers inject any
object offering `get`, `set` and `remove` (browser storage bridge, cookie jar,
Redis wrapper). `MemoryKeyValueStore` serves development and tests.
"""
from __future__ import annotations

from typing import Dict, Optional, Protocol


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)
