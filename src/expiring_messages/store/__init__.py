"""Key-value stores backing the expiration queue."""

from expiring_messages.store.base import KVStore, PrefixListingStore
from expiring_messages.store.memory import MemoryStore
from expiring_messages.store.sqlite import SQLiteStore

__all__ = ["KVStore", "MemoryStore", "PrefixListingStore", "SQLiteStore"]
