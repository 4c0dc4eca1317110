"""Duration tokens ("5m", "1h", "1d") and the allow-list policy."""

import re

from expiring_messages.errors import InvalidDuration
from expiring_messages.logging import get_logger

logger = get_logger(__name__)

DURATION_PATTERN = re.compile(r"^(\d+)([mhd])$", re.ASCII)

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

UNIT_MS = {
    "m": MINUTE_MS,
    "h": HOUR_MS,
    "d": DAY_MS,
}

# Used when a token passed the allow-list but still does not parse
FALLBACK_DURATION_MS = 5 * MINUTE_MS


def parse_duration(token: str) -> int:
    """Convert a duration token into milliseconds.

    Args:
        token: Digits followed by a unit, one of m (minutes), h (hours)
            or d (days). No sign, no whitespace.

    Returns:
        The duration in milliseconds.

    Raises:
        InvalidDuration: If the token does not match the anchored pattern.
    """
    # fullmatch: "$" alone would accept a trailing newline
    match = DURATION_PATTERN.fullmatch(token) if isinstance(token, str) else None
    if match is None:
        raise InvalidDuration(f"invalid duration format: {token!r}")

    value, unit = match.groups()
    return int(value) * UNIT_MS[unit]


def calculate_expires_at(token: str, now_ms: int) -> int:
    """Compute an absolute deadline for a duration token.

    Falls back to five minutes from now if the token doesn't parse, which
    can only happen when the allow-list is unrestricted.
    """
    try:
        return now_ms + parse_duration(token)
    except InvalidDuration:
        logger.warning("duration_fallback", duration=token, fallback_ms=FALLBACK_DURATION_MS)
        return now_ms + FALLBACK_DURATION_MS


def parse_allow_list(raw: str) -> list[str]:
    """Split a comma-separated allow-list into trimmed, non-empty entries."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def is_allowed(token: str, allow_list: list[str] | tuple[str, ...]) -> bool:
    """Check a duration token against the configured allow-list.

    An empty allow-list permits every token. Otherwise the token must equal
    one of the (trimmed) entries exactly; "60m" and "1h" are different tokens.
    """
    if not allow_list:
        return True
    return any(token == entry.strip() for entry in allow_list)
