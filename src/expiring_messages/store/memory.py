"""In-process key-value store."""

import threading

from expiring_messages.errors import StoreError


class MemoryStore:
    """Dictionary-backed store with key-ordered listing.

    Nothing survives a restart; used by tests and for dry runs.
    """

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: bytes) -> None:
        if not key:
            raise StoreError("key must not be empty")
        with self._lock:
            self._data[key] = bytes(value)

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def list_keys(self, page: int, per_page: int) -> list[str]:
        with self._lock:
            keys = sorted(self._data)
        start = page * per_page
        return keys[start : start + per_page]

    def list_keys_with_prefix(self, prefix: str, page: int, per_page: int) -> list[str]:
        with self._lock:
            keys = sorted(k for k in self._data if k.startswith(prefix))
        start = page * per_page
        return keys[start : start + per_page]

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data
