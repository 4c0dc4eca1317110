"""Garbage collection of stale expiration buckets."""

from expiring_messages.errors import DecodeError, StoreError
from expiring_messages.expiration.buckets import BUCKET_PREFIX, bucket_partition, decode_bucket_key
from expiring_messages.expiration.paging import collect_keys
from expiring_messages.logging import get_logger, log_buckets_reaped
from expiring_messages.store.base import KVStore

logger = get_logger(__name__)

DEFAULT_RETENTION_HOURS = 24
DEFAULT_CLEANUP_MAX_PAGES = 100


class BucketGarbageCollector:
    """Removes queue entries whose bucket is older than the retention horizon.

    Superseded entries (a post rescheduled to a new deadline) and entries a
    sweep never reached end up here. Keys that only look like bucket keys
    but fail a strict parse are never deleted.
    """

    def __init__(
        self,
        store: KVStore,
        retention_hours: int = DEFAULT_RETENTION_HOURS,
        page_size: int = 100,
        max_pages: int = DEFAULT_CLEANUP_MAX_PAGES,
    ) -> None:
        self.store = store
        self.retention_hours = retention_hours
        self.page_size = page_size
        self.max_pages = max_pages

    def cutoff_partition(self, now_ms: int) -> int:
        """Partitions strictly below this number are stale."""
        return bucket_partition(now_ms - self.retention_hours * 3600 * 1000)

    def cleanup(self, now_ms: int) -> int:
        """Delete stale bucket entries.

        Returns:
            Number of entries removed
        """
        cutoff = self.cutoff_partition(now_ms)
        keys = collect_keys(self.store, self.max_pages, self.page_size, [BUCKET_PREFIX])

        removed = 0
        for key in keys:
            try:
                partition = decode_bucket_key(key)
            except DecodeError:
                continue

            if partition >= cutoff:
                continue

            try:
                self.store.delete(key)
            except StoreError as e:
                logger.error("bucket_delete_failed", key=key, error=str(e))
                continue
            removed += 1

        if removed:
            log_buckets_reaped(logger, removed, cutoff)
        return removed
