"""Durable expiration queue built on a flat key-value store."""

from dataclasses import dataclass

from expiring_messages.content import ContentDeleter
from expiring_messages.errors import DecodeError, DeletionError, StoreError
from expiring_messages.expiration.buckets import (
    BUCKET_PREFIX,
    bucket_partition,
    decode_bucket_key,
    entry_key,
    partition_key,
)
from expiring_messages.expiration.paging import collect_keys
from expiring_messages.logging import (
    get_logger,
    log_content_expired,
    log_deletion_failed,
    log_entry_enqueued,
)
from expiring_messages.store.base import KVStore

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 100
DEFAULT_SWEEP_MAX_PAGES = 10
DEFAULT_RECOVERY_MAX_PAGES = 100
DEFAULT_RETENTION_MINUTES = 24 * 60


@dataclass
class SweepResult:
    """Outcome of one sweep or recovery pass."""

    examined: int = 0
    deleted: int = 0
    failed: int = 0
    skipped: int = 0


class ExpirationQueue:
    """Time-bucketed index of content items waiting to be deleted.

    Each scheduled deadline is one entry, keyed by its one-minute bucket and
    the content id, with the content id as value. Rescheduling writes a new
    entry and leaves the old one behind; the old entry is either swept (the
    deleter treats missing content as success) or reaped by the garbage
    collector.

    Example:
        queue = ExpirationQueue(store, deleter)
        queue.enqueue("post-id", expires_at_ms)
        queue.sweep(now_ms)  # once a minute
    """

    def __init__(
        self,
        store: KVStore,
        deleter: ContentDeleter,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_SWEEP_MAX_PAGES,
        recovery_max_pages: int = DEFAULT_RECOVERY_MAX_PAGES,
        retention_minutes: int = DEFAULT_RETENTION_MINUTES,
    ) -> None:
        """Initialize the queue.

        Args:
            store: Key-value store holding the entries
            deleter: Collaborator that permanently removes content
            page_size: Keys listed per store page
            max_pages: Pages listed per sweep; bounds the work done per tick
            recovery_max_pages: Pages listed by a recovery pass
            retention_minutes: How far back a recovery pass looks
        """
        self.store = store
        self.deleter = deleter
        self.page_size = page_size
        self.max_pages = max_pages
        self.recovery_max_pages = recovery_max_pages
        self.retention_minutes = retention_minutes

    def enqueue(self, content_id: str, expires_at_ms: int) -> bool:
        """Schedule a content item for deletion at a deadline.

        Best effort: a store failure is logged and not retried.

        Returns:
            True if the entry was written
        """
        key = entry_key(content_id, expires_at_ms)
        try:
            self.store.set(key, content_id.encode("utf-8"))
        except StoreError as e:
            logger.error(
                "enqueue_failed",
                content_id=content_id,
                key=key,
                error=str(e),
            )
            return False

        log_entry_enqueued(logger, content_id, expires_at_ms, key)
        return True

    def sweep(self, now_ms: int) -> SweepResult:
        """Delete content whose bucket is due.

        Looks at the current and the previous one-minute bucket, so a deadline
        just before a tick boundary isn't missed. Keys of other buckets are
        left alone.
        """
        current = bucket_partition(now_ms)
        prefixes = [partition_key(current), partition_key(current - 1)]

        keys = collect_keys(self.store, self.max_pages, self.page_size, prefixes)

        result = SweepResult()
        for key in keys:
            result.examined += 1
            self._process_entry(key, result)

        if result.examined:
            logger.info(
                "sweep_completed",
                partition=current,
                examined=result.examined,
                deleted=result.deleted,
                failed=result.failed,
                skipped=result.skipped,
            )
        return result

    def recover(self, now_ms: int) -> SweepResult:
        """Process every entry that fell due while no sweep was running.

        Run once at start-up. Covers all buckets from the retention horizon
        up to and including the current one; later buckets are left for the
        regular sweep.
        """
        current = bucket_partition(now_ms)
        oldest = current - self.retention_minutes

        keys = collect_keys(
            self.store, self.recovery_max_pages, self.page_size, [BUCKET_PREFIX]
        )

        result = SweepResult()
        for key in keys:
            try:
                partition = decode_bucket_key(key)
            except DecodeError:
                continue
            if not oldest <= partition <= current:
                continue

            result.examined += 1
            self._process_entry(key, result)

        logger.info(
            "recovery_completed",
            partition=current,
            examined=result.examined,
            deleted=result.deleted,
            failed=result.failed,
        )
        return result

    def pending(self, max_pages: int | None = None) -> dict[int, list[str]]:
        """Return scheduled content ids grouped by partition."""
        keys = collect_keys(
            self.store,
            max_pages or self.recovery_max_pages,
            self.page_size,
            [BUCKET_PREFIX],
        )

        buckets: dict[int, list[str]] = {}
        for key in keys:
            try:
                partition = decode_bucket_key(key)
            except DecodeError:
                continue
            content_id = key[len(partition_key(partition)) :]
            buckets.setdefault(partition, []).append(content_id)
        return buckets

    def _process_entry(self, key: str, result: SweepResult) -> None:
        """Delete the content an entry points at, then drop the entry.

        The entry is removed even when deletion fails so a broken item can't
        be retried every minute forever.
        """
        try:
            value = self.store.get(key)
        except StoreError as e:
            # Entry stays; the next tick tries again
            logger.error("entry_read_failed", key=key, error=str(e))
            result.skipped += 1
            return

        if value is None:
            result.skipped += 1
            return

        content_id = value.decode("utf-8", errors="replace")
        if content_id:
            try:
                self.deleter.delete(content_id)
            except DeletionError as e:
                log_deletion_failed(logger, content_id, key, e.reason)
                result.failed += 1
            except Exception as e:
                log_deletion_failed(logger, content_id, key, str(e))
                result.failed += 1
            else:
                log_content_expired(logger, content_id, key)
                result.deleted += 1
        else:
            result.skipped += 1

        try:
            self.store.delete(key)
        except StoreError as e:
            logger.error("entry_delete_failed", key=key, error=str(e))
