"""Periodic loop driving the expiration sweep and bucket garbage collection."""

import asyncio
from enum import Enum
from typing import Callable

from expiring_messages.content import Clock
from expiring_messages.expiration import BucketGarbageCollector, ExpirationQueue
from expiring_messages.logging import get_logger

logger = get_logger(__name__)

DEFAULT_INTERVAL = 60.0


class SchedulerState(Enum):
    """State of the scheduler loop."""

    RUNNING = "running"
    STOPPED = "stopped"


class ExpirationScheduler:
    """Single periodic loop that sweeps due entries and reaps stale buckets.

    Every tick runs the sweep and then the garbage collector, one after the
    other, in a worker thread so store I/O doesn't block the event loop.
    A failure in either step is logged and never skips the other step or
    ends the loop.

    Example:
        scheduler = ExpirationScheduler(queue, collector, SystemClock())
        task = asyncio.create_task(scheduler.start())
        ...
        scheduler.stop()
        await task
    """

    def __init__(
        self,
        queue: ExpirationQueue,
        collector: BucketGarbageCollector,
        clock: Clock,
        interval: float = DEFAULT_INTERVAL,
        recover_on_start: bool = False,
    ) -> None:
        """Initialize the scheduler.

        Args:
            queue: Expiration queue to sweep
            collector: Garbage collector run after every sweep
            clock: Source of the current time
            interval: Seconds between ticks
            recover_on_start: Process entries that fell due while stopped
                before the first tick
        """
        self.queue = queue
        self.collector = collector
        self.clock = clock
        self.interval = interval
        self.recover_on_start = recover_on_start

        self._state = SchedulerState.STOPPED
        self._stop_event: asyncio.Event | None = None
        self._tick_count = 0

        self._tick_callbacks: list[Callable[[int], None]] = []

    @property
    def state(self) -> SchedulerState:
        """Get current loop state."""
        return self._state

    @property
    def tick_count(self) -> int:
        """Number of completed ticks since construction."""
        return self._tick_count

    def on_tick(self, callback: Callable[[int], None]) -> None:
        """Register callback called with the tick number after every tick."""
        self._tick_callbacks.append(callback)

    async def start(self) -> None:
        """Run the loop until stop() is called.

        The first tick happens one interval after start, like a ticker.
        """
        if self._state == SchedulerState.RUNNING:
            return

        self._stop_event = asyncio.Event()
        self._state = SchedulerState.RUNNING
        logger.info("scheduler_started", interval=self.interval)

        if self.recover_on_start:
            await asyncio.to_thread(self._recover)

        try:
            while self._state == SchedulerState.RUNNING:
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                except asyncio.TimeoutError:
                    pass
                if self._state != SchedulerState.RUNNING:
                    break
                await asyncio.to_thread(self.run_once)
        finally:
            self._state = SchedulerState.STOPPED
            logger.info("scheduler_stopped", ticks=self._tick_count)

    def stop(self) -> None:
        """Signal the loop to exit after the current tick.

        Safe to call more than once, and before start().
        """
        if self._state != SchedulerState.RUNNING:
            return
        self._state = SchedulerState.STOPPED
        if self._stop_event is not None:
            self._stop_event.set()

    def run_once(self) -> None:
        """Run a single tick: sweep, then garbage-collect."""
        now = self.clock.now_ms()

        try:
            self.queue.sweep(now)
        except Exception as e:
            logger.error("sweep_failed", error=str(e), exc_info=True)

        try:
            self.collector.cleanup(now)
        except Exception as e:
            logger.error("cleanup_failed", error=str(e), exc_info=True)

        self._tick_count += 1
        for callback in self._tick_callbacks:
            try:
                callback(self._tick_count)
            except Exception:
                logger.warning("tick_callback_failed", exc_info=True)

    def _recover(self) -> None:
        try:
            self.queue.recover(self.clock.now_ms())
        except Exception as e:
            logger.error("recovery_failed", error=str(e), exc_info=True)
