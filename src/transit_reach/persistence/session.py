"""Session-scoped key/value storage for cached API payloads."""

from __future__ import annotations

import json
from threading import Lock
from typing import Any


class SessionStore:
    """In-process text store that lives exactly as long as the owning session.

    Values are kept as JSON text, never written to disk, and dropped when the
    store is cleared or garbage collected.
    """

    def __init__(self) -> None:
        self._items: dict[str, str] = {}
        self._lock = Lock()

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError("SessionStore values must be strings.")
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def read_json(self, key: str) -> Any:
        raw = self.get_item(key)
        if not raw:
            return None
        return json.loads(raw)

    def write_json(self, key: str, data: Any) -> None:
        self.set_item(key, json.dumps(data, ensure_ascii=False))
