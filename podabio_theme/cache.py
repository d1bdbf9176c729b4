from __future__ import annotations

import threading
from copy import deepcopy
from typing import Any, Optional


class ThemeCache:
    """Theme records keyed by id.

    Entries never expire on their own; callers invalidate after every write.
    Records are copied in and out so cached state cannot be mutated by callers.
    """

    def __init__(self) -> None:
        self._entries: dict[int, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, theme_id: int) -> Optional[dict[str, Any]]:
        with self._lock:
            entry = self._entries.get(theme_id)
            return deepcopy(entry) if entry is not None else None

    def set(self, theme_id: int, record: dict[str, Any]) -> None:
        with self._lock:
            self._entries[theme_id] = deepcopy(record)

    def invalidate(self, theme_id: int) -> None:
        with self._lock:
            self._entries.pop(theme_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, theme_id: object) -> bool:
        with self._lock:
            return theme_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
