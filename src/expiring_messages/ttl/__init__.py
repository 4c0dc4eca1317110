"""TTL descriptors, duration tokens and the request state machine."""

from expiring_messages.ttl.descriptor import TTL_PROP_KEY, TTLDescriptor, decode_descriptor
from expiring_messages.ttl.duration import (
    calculate_expires_at,
    is_allowed,
    parse_allow_list,
    parse_duration,
)
from expiring_messages.ttl.state_machine import TTLAction, TTLDecision, TTLRequestProcessor

__all__ = [
    "TTL_PROP_KEY",
    "TTLAction",
    "TTLDecision",
    "TTLDescriptor",
    "TTLRequestProcessor",
    "calculate_expires_at",
    "decode_descriptor",
    "is_allowed",
    "parse_allow_list",
    "parse_duration",
]
