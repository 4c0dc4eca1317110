"""Decides what to do with the TTL descriptor of a created or edited item."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from expiring_messages.content import EXPIRING_CONTENT_TYPE, Clock, ContentItem
from expiring_messages.errors import ValidationError
from expiring_messages.logging import get_logger
from expiring_messages.ttl.descriptor import TTL_PROP_KEY, decode_descriptor, previous_deadline
from expiring_messages.ttl.duration import calculate_expires_at, is_allowed

if TYPE_CHECKING:
    from expiring_messages.config.plugin_config import PluginConfiguration

logger = get_logger(__name__)

DURATION_REQUIRED_MESSAGE = "TTL duration is required when TTL is enabled"


class TTLAction(Enum):
    """What the state machine did with an item."""

    IGNORE = "ignore"
    REJECT = "reject"
    CLEAR = "clear"
    SCHEDULE = "schedule"


@dataclass
class TTLDecision:
    """Result of processing one create or update event."""

    action: TTLAction
    error: str = ""
    expires_at: int = 0
    should_enqueue: bool = False

    def raise_for_reject(self) -> None:
        """Raise ValidationError carrying the rejection message, if any."""
        if self.action is TTLAction.REJECT:
            raise ValidationError(self.error)


class TTLRequestProcessor:
    """Validates TTL requests and computes their deadlines.

    The item's property bag is mutated in place: a disabled descriptor is
    removed, a valid one gets a server-computed expires_at. On rejection
    the bag is left exactly as it was.

    Example:
        processor = TTLRequestProcessor(SystemClock())
        decision = processor.process_create(item, config)
        if decision.action is TTLAction.REJECT:
            return item, decision.error
    """

    def __init__(self, clock: Clock) -> None:
        self.clock = clock

    def process_create(self, item: ContentItem, config: PluginConfiguration) -> TTLDecision:
        """Handle a new item.

        Never enqueues; scheduling waits until the item is durably created.
        """
        if not config.enabled:
            return TTLDecision(TTLAction.IGNORE)
        return self._evaluate(item, config)

    def process_update(
        self,
        new_item: ContentItem,
        old_item: ContentItem | None,
        config: PluginConfiguration,
    ) -> TTLDecision:
        """Handle an edited item.

        Requests an enqueue when the recomputed deadline differs from the one
        the previous version of the item carried.
        """
        if not config.enabled:
            return self._strip_disabled(new_item)

        decision = self._evaluate(new_item, config)
        if decision.action is TTLAction.SCHEDULE:
            old_deadline = previous_deadline(old_item.props if old_item else None)
            decision.should_enqueue = decision.expires_at != old_deadline
        return decision

    def _evaluate(self, item: ContentItem, config: PluginConfiguration) -> TTLDecision:
        descriptor = decode_descriptor(item.props)
        if descriptor is None:
            return TTLDecision(TTLAction.IGNORE)

        if not descriptor.is_enabled:
            del item.props[TTL_PROP_KEY]
            return TTLDecision(TTLAction.CLEAR)

        duration = descriptor.duration
        if not duration:
            return TTLDecision(TTLAction.REJECT, error=DURATION_REQUIRED_MESSAGE)

        if not is_allowed(duration, config.allowed_durations):
            return TTLDecision(
                TTLAction.REJECT,
                error=f"TTL duration '{duration}' is not allowed",
            )

        expires_at = calculate_expires_at(duration, self.clock.now_ms())
        descriptor.expires_at = expires_at
        item.props[TTL_PROP_KEY] = descriptor.to_props()
        item.type = EXPIRING_CONTENT_TYPE

        logger.debug("ttl_scheduled", content_id=item.id, duration=duration, expires_at=expires_at)
        return TTLDecision(TTLAction.SCHEDULE, expires_at=expires_at)

    def _strip_disabled(self, item: ContentItem) -> TTLDecision:
        """With the feature off, drop descriptors that no longer ask for a TTL."""
        descriptor = decode_descriptor(item.props)
        if descriptor is None or descriptor.is_enabled:
            return TTLDecision(TTLAction.IGNORE)

        del item.props[TTL_PROP_KEY]
        return TTLDecision(TTLAction.CLEAR)
