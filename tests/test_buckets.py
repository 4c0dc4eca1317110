"""Unit tests for bucket key encoding and decoding."""

import pytest

from expiring_messages.errors import DecodeError
from expiring_messages.expiration.buckets import (
    bucket_partition,
    decode_bucket_key,
    encode_bucket_key,
    entry_key,
)

from conftest import MINUTE, NOW


class TestEncodeBucketKey:
    """Tests for encode_bucket_key() and entry_key()."""

    def test_encodes_minute_partition(self):
        """1700000000 s / 60 = 28333333.33, floored."""
        assert encode_bucket_key(NOW) == "expiration_bucket_28333333_"

    def test_same_minute_shares_a_bucket(self):
        start = 28333333 * MINUTE
        assert encode_bucket_key(start) == encode_bucket_key(start + MINUTE - 1)
        assert encode_bucket_key(start) != encode_bucket_key(start + MINUTE)

    def test_entry_key_appends_content_id(self):
        assert entry_key("post1", NOW) == "expiration_bucket_28333333_post1"

    def test_partition_increases_with_time(self):
        partitions = [bucket_partition(NOW + i * MINUTE) for i in range(5)]
        assert partitions == sorted(partitions)
        assert len(set(partitions)) == 5


class TestDecodeBucketKey:
    """Tests for decode_bucket_key()."""

    @pytest.mark.parametrize(
        "timestamp",
        [0, 59_999, 60_000, NOW, NOW + 123_456, 4_102_444_800_000],
    )
    def test_roundtrip_recovers_partition(self, timestamp):
        assert decode_bucket_key(encode_bucket_key(timestamp)) == bucket_partition(timestamp)

    def test_decodes_entry_key(self):
        assert decode_bucket_key("expiration_bucket_28333333_post1") == 28333333

    def test_content_id_with_digits_is_not_part_of_partition(self):
        assert decode_bucket_key("expiration_bucket_28333333_123abc") == 28333333

    @pytest.mark.parametrize(
        "key",
        [
            "",
            "28333333_post1",
            "other_bucket_28333333_post1",
            "expiration_bucket_28333333",
            "expiration_bucket_",
            "expiration_bucket__post1",
            "expiration_bucket_abc_post1",
            "expiration_bucket_12a_post1",
            "expiration_bucket_-5_post1",
            "expiration_bucket_ 5_post1",
        ],
    )
    def test_malformed_keys_raise(self, key):
        with pytest.raises(DecodeError):
            decode_bucket_key(key)
