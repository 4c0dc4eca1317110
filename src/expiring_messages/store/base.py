"""Key-value store protocols consumed by the expiration engine."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class KVStore(Protocol):
    """Flat key-value store with paginated key listing.

    Operations are atomic per key but not transactional across keys.
    All failures are raised as StoreError.
    """

    def set(self, key: str, value: bytes) -> None: ...

    def get(self, key: str) -> bytes | None:
        """Return the stored value, or None if the key doesn't exist."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key. Deleting a missing key is not an error."""
        ...

    def list_keys(self, page: int, per_page: int) -> list[str]:
        """Return one page of keys; page 0 is the first page.

        Ordering only has to be stable within a single sweep or cleanup pass.
        """
        ...


@runtime_checkable
class PrefixListingStore(Protocol):
    """Store that can list only the keys starting with a prefix."""

    def list_keys_with_prefix(self, prefix: str, page: int, per_page: int) -> list[str]: ...
