"""Bounded key listing shared by the sweep and the garbage collector."""

from expiring_messages.errors import StoreError
from expiring_messages.logging import get_logger
from expiring_messages.store.base import KVStore, PrefixListingStore

logger = get_logger(__name__)


def collect_keys(
    store: KVStore,
    max_pages: int,
    page_size: int,
    prefixes: list[str] | None = None,
) -> list[str]:
    """List at most max_pages * page_size keys from the store.

    Keys are gathered before any of them is deleted so that removing
    entries doesn't shift the remaining pages. With prefixes, only keys
    starting with one of them are returned; a store-side prefix query is
    used when the store supports it and listed keys are filtered otherwise.
    A listing failure is logged and ends the listing early.
    """
    if prefixes is not None and isinstance(store, PrefixListingStore):
        return _collect_with_prefix_query(store, max_pages, page_size, prefixes)

    keys: list[str] = []
    for page in range(max_pages):
        try:
            batch = store.list_keys(page, page_size)
        except StoreError as e:
            logger.error("list_keys_failed", page=page, error=str(e))
            break

        if not batch:
            break

        if prefixes is None:
            keys.extend(batch)
        else:
            keys.extend(k for k in batch if any(k.startswith(p) for p in prefixes))

        if len(batch) < page_size:
            break
    return keys


def _collect_with_prefix_query(
    store: PrefixListingStore,
    max_pages: int,
    page_size: int,
    prefixes: list[str],
) -> list[str]:
    keys: list[str] = []
    pages_left = max_pages
    for prefix in prefixes:
        page = 0
        while pages_left > 0:
            try:
                batch = store.list_keys_with_prefix(prefix, page, page_size)
            except StoreError as e:
                logger.error("list_keys_failed", prefix=prefix, page=page, error=str(e))
                return keys

            pages_left -= 1
            keys.extend(batch)
            if len(batch) < page_size:
                break
            page += 1
    return keys
