"""Host-facing plugin: content hooks, configuration reload and lifecycle."""

import asyncio

from expiring_messages.config import (
    ConfigurationHolder,
    ConfigurationLoader,
    PluginConfiguration,
    Settings,
    settings_loader,
)
from expiring_messages.content import Clock, ContentDeleter, ContentItem, SystemClock
from expiring_messages.engine import ExpirationScheduler
from expiring_messages.errors import ActivationError, StoreError
from expiring_messages.expiration import BucketGarbageCollector, ExpirationQueue
from expiring_messages.logging import get_logger, log_config_change
from expiring_messages.store.base import KVStore
from expiring_messages.ttl import TTLAction, TTLRequestProcessor, decode_descriptor

logger = get_logger(__name__)


class ExpiringMessagesPlugin:
    """Honours TTL descriptors on content and deletes content when it expires.

    The host calls on_create/on_update before persisting an item, on_created
    after it is persisted, and on_config_change whenever the plugin's
    configuration changes. activate() starts the background sweep.

    Example:
        plugin = ExpiringMessagesPlugin(SQLiteStore(path), HttpContentDeleter(url))
        await plugin.activate()
        item, error = plugin.on_create(item)
        ...
        await plugin.deactivate()
    """

    def __init__(
        self,
        store: KVStore,
        deleter: ContentDeleter,
        clock: Clock | None = None,
        loader: ConfigurationLoader = settings_loader,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the plugin.

        Args:
            store: Key-value store holding the expiration index
            deleter: Collaborator that permanently removes content
            clock: Time source, defaults to the system clock
            loader: Callable returning a fresh configuration snapshot
            settings: Scheduler and paging settings, defaults to Settings()
        """
        settings = settings or Settings()

        self.store = store
        self.clock = clock or SystemClock()
        self.loader = loader
        self.configuration = ConfigurationHolder()

        self.processor = TTLRequestProcessor(self.clock)
        self.queue = ExpirationQueue(
            store,
            deleter,
            page_size=settings.page_size,
            max_pages=settings.sweep_max_pages,
            recovery_max_pages=settings.cleanup_max_pages,
            retention_minutes=settings.retention_hours * 60,
        )
        self.collector = BucketGarbageCollector(
            store,
            retention_hours=settings.retention_hours,
            page_size=settings.page_size,
            max_pages=settings.cleanup_max_pages,
        )
        self.scheduler = ExpirationScheduler(
            self.queue,
            self.collector,
            self.clock,
            interval=settings.sweep_interval,
            recover_on_start=settings.recover_on_start,
        )

        self._scheduler_task: asyncio.Task | None = None

    # --- Lifecycle ---

    async def activate(self) -> None:
        """Load configuration, check the store and start the scheduler.

        Raises:
            ActivationError: If the store can't be reached
        """
        self.on_config_change()

        try:
            self.store.list_keys(0, 1)
        except StoreError as e:
            logger.error("activation_failed", error=str(e))
            raise ActivationError(f"Expiration store unavailable: {e}") from e

        self._scheduler_task = asyncio.create_task(self.scheduler.start())
        # Let the loop enter RUNNING so an immediate deactivate() can stop it
        await asyncio.sleep(0)
        logger.info("plugin_activated", enabled=self.configuration.get().enabled)

    async def deactivate(self) -> None:
        """Stop the scheduler and wait for the current tick to finish."""
        task, self._scheduler_task = self._scheduler_task, None
        if task is None:
            return

        self.scheduler.stop()
        await task
        logger.info("plugin_deactivated")

    # --- Configuration ---

    def on_config_change(self) -> None:
        """Reload configuration and swap it in.

        Loader errors propagate to the host; the previous snapshot stays.
        """
        new = self.loader()
        old = self.configuration.replace(new)
        self._log_changes(old, new)

    def _log_changes(self, old: PluginConfiguration, new: PluginConfiguration) -> None:
        if old.enabled != new.enabled:
            log_config_change(logger, "enabled", str(old.enabled), str(new.enabled))
        if old.allowed_durations != new.allowed_durations:
            log_config_change(
                logger,
                "allowed_durations",
                ",".join(old.allowed_durations),
                ",".join(new.allowed_durations),
            )

    # --- Content hooks ---

    def on_create(self, item: ContentItem | None) -> tuple[ContentItem | None, str]:
        """Validate the TTL of an item about to be created.

        Returns:
            The (possibly modified) item and an error message, empty on success
        """
        if item is None or item.props is None:
            return item, ""

        decision = self.processor.process_create(item, self.configuration.get())
        return item, decision.error

    def on_created(self, item: ContentItem | None) -> None:
        """Schedule an item's deletion once it has been persisted."""
        if item is None or item.props is None:
            return

        # With the feature off, expires_at was never computed server-side
        if not self.configuration.get().enabled:
            return

        descriptor = decode_descriptor(item.props)
        if descriptor is None or not descriptor.is_enabled or descriptor.expires_at is None:
            return

        self.queue.enqueue(item.id, descriptor.deadline)

    def on_update(
        self, new_item: ContentItem | None, old_item: ContentItem | None
    ) -> tuple[ContentItem | None, str]:
        """Validate an edit and reschedule when the deadline moved.

        Returns:
            The (possibly modified) item and an error message, empty on success
        """
        if new_item is None or new_item.props is None:
            return new_item, ""

        decision = self.processor.process_update(new_item, old_item, self.configuration.get())
        if decision.action is TTLAction.SCHEDULE and decision.should_enqueue:
            self.queue.enqueue(new_item.id, decision.expires_at)
        return new_item, decision.error
