"""Shared fixtures for the expiration engine tests."""

import pytest

from expiring_messages.config import PluginConfiguration, Settings
from expiring_messages.content import FixedClock
from expiring_messages.errors import DeletionError, StoreError
from expiring_messages.store import MemoryStore

# 2023-11-14T22:13:20Z
NOW = 1_700_000_000_000
MINUTE = 60 * 1000
HOUR = 60 * MINUTE


class RecordingDeleter:
    """Content deleter that remembers what it was asked to delete."""

    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.calls: list[str] = []
        self.fail_for = fail_for or set()

    def delete(self, content_id: str) -> None:
        self.calls.append(content_id)
        if content_id in self.fail_for:
            raise DeletionError(content_id, "permission denied")


class ListOnlyStore:
    """Store without a prefix query, forcing listing plus filtering."""

    def __init__(self) -> None:
        self._inner = MemoryStore()

    def set(self, key: str, value: bytes) -> None:
        self._inner.set(key, value)

    def get(self, key: str) -> bytes | None:
        return self._inner.get(key)

    def delete(self, key: str) -> None:
        self._inner.delete(key)

    def list_keys(self, page: int, per_page: int) -> list[str]:
        return self._inner.list_keys(page, per_page)

    def __contains__(self, key: object) -> bool:
        return key in self._inner

    def __len__(self) -> int:
        return len(self._inner)


class BrokenStore(MemoryStore):
    """Store whose reads and listings fail."""

    def get(self, key: str) -> bytes | None:
        raise StoreError("connection reset")

    def list_keys(self, page: int, per_page: int) -> list[str]:
        raise StoreError("connection reset")

    def list_keys_with_prefix(self, prefix: str, page: int, per_page: int) -> list[str]:
        raise StoreError("connection reset")


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def deleter():
    return RecordingDeleter()


@pytest.fixture
def config():
    return PluginConfiguration(enabled=True, allowed_durations=["5m", "15m", "1h"])


@pytest.fixture
def unrestricted_config():
    return PluginConfiguration(enabled=True, allowed_durations=[])


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        sweep_interval=0.01,
        recover_on_start=False,
    )
