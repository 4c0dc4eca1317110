"""Structured logging for the expiration engine.

Uses structlog for contextual JSON logging with typed audit events for
scheduling, sweeping and bucket garbage collection.

Usage:
    from expiring_messages.logging import setup_logging, get_logger

    setup_logging("INFO")
    log = get_logger("expiring_messages.expiration")
    log.info("entry_enqueued", content_id="abc123", partition=28333333)
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import Processor

# Loggers of libraries we call that are chatty at INFO
_QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: str = "INFO") -> None:
    """Send structlog and stdlib records to stderr as JSON lines.

    stdout is left to command output, so `--json` results stay parseable.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    pre_chain: list[Processor] = [
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.add_log_level,
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(sort_keys=True),
            foreign_pre_chain=pre_chain,
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper())

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, named after the calling module by convention."""
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


# --- Audit Event Functions ---
# Typed interfaces for expiration audit events


def log_entry_enqueued(
    logger: structlog.stdlib.BoundLogger,
    content_id: str,
    expires_at: int,
    key: str,
) -> None:
    """Log a content item scheduled for deletion.

    Args:
        logger: Logger instance
        content_id: Identifier of the scheduled content item
        expires_at: Deadline in epoch milliseconds
        key: Expiration queue entry key
    """
    logger.info(
        "entry_enqueued",
        content_id=content_id,
        expires_at=expires_at,
        key=key,
    )


def log_content_expired(
    logger: structlog.stdlib.BoundLogger,
    content_id: str,
    key: str,
) -> None:
    """Log a content item permanently deleted by a sweep."""
    logger.info("content_expired", content_id=content_id, key=key)


def log_deletion_failed(
    logger: structlog.stdlib.BoundLogger,
    content_id: str,
    key: str,
    error: str,
) -> None:
    """Log a failed deletion.

    The queue entry is still removed; the content item is left for an
    operator to resolve.

    Args:
        logger: Logger instance
        content_id: Identifier of the content item that survived
        key: Expiration queue entry key that was dropped
        error: Error message from the deletion collaborator
    """
    logger.error(
        "deletion_failed",
        content_id=content_id,
        key=key,
        error=error,
    )


def log_buckets_reaped(
    logger: structlog.stdlib.BoundLogger,
    removed: int,
    cutoff_partition: int,
) -> None:
    """Log the result of a garbage collection pass."""
    logger.info(
        "buckets_reaped",
        removed=removed,
        cutoff_partition=cutoff_partition,
    )


def log_config_change(
    logger: structlog.stdlib.BoundLogger,
    key: str,
    old_value: str | None,
    new_value: str,
) -> None:
    """Log a configuration change.

    Args:
        logger: Logger instance
        key: Configuration key that changed
        old_value: Previous value (None if not loaded before)
        new_value: New value

    Note: Values are logged as strings. Do NOT pass sensitive values like tokens.
    """
    logger.info(
        "config_change",
        key=key,
        old_value=old_value,
        new_value=new_value,
    )
