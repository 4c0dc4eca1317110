"""Exception types raised by the expiration engine."""


class ExpiringMessagesError(Exception):
    """Base class for all expiring-messages errors."""


class ValidationError(ExpiringMessagesError):
    """A TTL request was rejected.

    The message is surfaced verbatim to the caller of the content hook.
    """


class InvalidDuration(ExpiringMessagesError, ValueError):
    """A duration token could not be parsed."""


class StoreError(ExpiringMessagesError):
    """The key-value store failed a set/get/delete/list operation."""


class DecodeError(ExpiringMessagesError):
    """A key does not have the bucket key structure."""


class DeletionError(ExpiringMessagesError):
    """The content deletion collaborator failed."""

    def __init__(self, content_id: str, reason: str) -> None:
        super().__init__(f"Failed to delete content {content_id}: {reason}")
        self.content_id = content_id
        self.reason = reason


class ActivationError(ExpiringMessagesError):
    """Plugin start-up failed (e.g. the store could not be bootstrapped)."""
