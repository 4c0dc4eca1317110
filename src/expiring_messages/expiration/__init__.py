"""Expiration queue, bucket keys and bucket garbage collection."""

from expiring_messages.expiration.buckets import (
    BUCKET_PREFIX,
    bucket_partition,
    decode_bucket_key,
    encode_bucket_key,
    entry_key,
)
from expiring_messages.expiration.cleanup import BucketGarbageCollector
from expiring_messages.expiration.queue import ExpirationQueue, SweepResult

__all__ = [
    "BUCKET_PREFIX",
    "BucketGarbageCollector",
    "ExpirationQueue",
    "SweepResult",
    "bucket_partition",
    "decode_bucket_key",
    "encode_bucket_key",
    "entry_key",
]
