"""Unit tests for duration tokens and the allow-list policy.

Tests parse_duration(), calculate_expires_at() and is_allowed() to ensure:
- Valid tokens convert to exact millisecond offsets
- Anything outside the anchored pattern is rejected
- Unparsable tokens fall back to a five minute deadline
- The allow-list matches exact, case-sensitive tokens
"""

import pytest

from expiring_messages.errors import InvalidDuration
from expiring_messages.ttl.duration import (
    calculate_expires_at,
    is_allowed,
    parse_allow_list,
    parse_duration,
)

from conftest import HOUR, MINUTE, NOW


class TestParseDuration:
    """Tests for parse_duration()."""

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("5m", 5 * MINUTE),
            ("15m", 15 * MINUTE),
            ("1h", HOUR),
            ("24h", 24 * HOUR),
            ("1d", 24 * HOUR),
            ("7d", 7 * 24 * HOUR),
            ("0m", 0),
            ("007m", 7 * MINUTE),
        ],
    )
    def test_valid_tokens(self, token, expected):
        """Digits followed by m/h/d convert exactly."""
        assert parse_duration(token) == expected

    @pytest.mark.parametrize(
        "token",
        [
            "",
            "5",
            "m",
            "-5m",
            "+5m",
            "5s",
            "5M",
            "1.5h",
            "5 m",
            " 5m",
            "5m ",
            "5m\n",
            "5mm",
            "h1",
            "٥m",  # Arabic-Indic digit five
        ],
    )
    def test_invalid_tokens_raise(self, token):
        """Anything outside ^(\\d+)([mhd])$ is rejected."""
        with pytest.raises(InvalidDuration):
            parse_duration(token)

    def test_invalid_duration_is_value_error(self):
        """Callers catching ValueError also catch InvalidDuration."""
        with pytest.raises(ValueError, match="invalid duration format"):
            parse_duration("forever")


class TestCalculateExpiresAt:
    """Tests for calculate_expires_at()."""

    def test_adds_duration_to_now(self):
        assert calculate_expires_at("15m", NOW) == NOW + 15 * MINUTE

    def test_unparsable_token_falls_back_to_five_minutes(self):
        """A token the parser rejects still yields a deadline."""
        assert calculate_expires_at("soon", NOW) == NOW + 5 * MINUTE


class TestAllowList:
    """Tests for is_allowed() and parse_allow_list()."""

    def test_empty_allow_list_permits_everything(self):
        for token in ["5m", "1d", "soon", ""]:
            assert is_allowed(token, []) is True

    def test_member_is_allowed(self):
        assert is_allowed("15m", ["5m", "15m", "1h"]) is True

    def test_non_member_is_rejected(self):
        assert is_allowed("1d", ["5m", "15m", "1h"]) is False

    def test_equivalent_durations_are_different_tokens(self):
        """60m and 1h mean the same time but are not the same token."""
        assert is_allowed("60m", ["1h"]) is False

    def test_match_is_case_sensitive(self):
        assert is_allowed("5M", ["5m"]) is False

    def test_configured_entries_are_trimmed(self):
        assert is_allowed("5m", [" 5m ", "1h"]) is True

    def test_input_token_is_not_trimmed(self):
        assert is_allowed(" 5m", ["5m"]) is False

    def test_parse_allow_list_splits_and_trims(self):
        assert parse_allow_list(" 5m, 15m ,,1h ") == ["5m", "15m", "1h"]

    def test_parse_allow_list_empty(self):
        assert parse_allow_list("") == []
        assert parse_allow_list(" , ") == []
