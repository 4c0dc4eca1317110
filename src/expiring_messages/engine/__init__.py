"""Engine module for the expiration scheduler."""

from expiring_messages.engine.scheduler import ExpirationScheduler, SchedulerState

__all__ = ["ExpirationScheduler", "SchedulerState"]
