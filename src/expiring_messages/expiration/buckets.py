"""Bucket keys for the expiration index.

Deadlines are grouped into one-minute partitions:

    expiration_bucket_<floor(unix_seconds / 60)>_<content_id>

The underscore after the partition number is part of the bucket key, so a
prefix search for one bucket never matches a neighbouring partition
(e.g. "..._2833333_" vs "..._28333330_") and the content id can't be read
as more digits of the partition.
"""

from expiring_messages.errors import DecodeError

BUCKET_PREFIX = "expiration_bucket_"
BUCKET_SECONDS = 60


def bucket_partition(timestamp_ms: int) -> int:
    """Return the one-minute partition number for an epoch-ms timestamp."""
    # Whole seconds first, matching how deadlines are bucketed when enqueued
    return (timestamp_ms // 1000) // BUCKET_SECONDS


def partition_key(partition: int) -> str:
    """Return the bucket key for a partition number."""
    return f"{BUCKET_PREFIX}{partition}_"


def encode_bucket_key(timestamp_ms: int) -> str:
    """Return the bucket key that a timestamp falls into."""
    return partition_key(bucket_partition(timestamp_ms))


def entry_key(content_id: str, expires_at_ms: int) -> str:
    """Return the queue entry key for a content item and its deadline."""
    return encode_bucket_key(expires_at_ms) + content_id


def decode_bucket_key(key: str) -> int:
    """Parse the partition number out of a bucket or entry key.

    Raises:
        DecodeError: If the key lacks the prefix, the numeric segment, or the
            underscore terminating it.
    """
    if not key.startswith(BUCKET_PREFIX):
        raise DecodeError(f"not a bucket key: {key!r}")

    number, sep, _ = key[len(BUCKET_PREFIX) :].partition("_")
    if not sep:
        raise DecodeError(f"bucket key has no terminating underscore: {key!r}")
    if not (number.isascii() and number.isdigit()):
        raise DecodeError(f"bucket key has a non-numeric partition: {key!r}")
    return int(number, 10)
