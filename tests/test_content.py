"""Tests for the HTTP content deleter and the clocks."""

import httpx
import pytest

from expiring_messages.content import FixedClock, HttpContentDeleter, SystemClock
from expiring_messages.errors import DeletionError


def make_deleter(handler, token="secret") -> tuple[HttpContentDeleter, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    deleter = HttpContentDeleter(
        "https://chat.example.com/",
        access_token=token,
        transport=httpx.MockTransport(record),
    )
    return deleter, requests


class TestHttpContentDeleter:
    """Tests for HttpContentDeleter.delete()."""

    def test_issues_permanent_delete(self):
        deleter, requests = make_deleter(lambda r: httpx.Response(200, json={"status": "OK"}))

        deleter.delete("abc123")

        assert len(requests) == 1
        request = requests[0]
        assert request.method == "DELETE"
        assert request.url.path == "/api/v4/posts/abc123"
        assert request.url.params["permanent"] == "true"
        assert request.headers["Authorization"] == "Bearer secret"
        deleter.close()

    def test_no_token_sends_no_authorization(self):
        deleter, requests = make_deleter(lambda r: httpx.Response(200), token=None)
        deleter.delete("abc123")
        assert "Authorization" not in requests[0].headers

    def test_already_deleted_is_success(self):
        deleter, _ = make_deleter(lambda r: httpx.Response(404))
        deleter.delete("gone")

    def test_server_error_raises(self):
        deleter, _ = make_deleter(lambda r: httpx.Response(500, text="boom"))
        with pytest.raises(DeletionError) as exc_info:
            deleter.delete("abc123")
        assert exc_info.value.content_id == "abc123"
        assert "500" in exc_info.value.reason

    def test_forbidden_raises(self):
        deleter, _ = make_deleter(lambda r: httpx.Response(403))
        with pytest.raises(DeletionError):
            deleter.delete("abc123")

    def test_connection_error_raises(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        deleter, _ = make_deleter(refuse)
        with pytest.raises(DeletionError, match="request failed"):
            deleter.delete("abc123")


class TestClocks:
    """Tests for SystemClock and FixedClock."""

    def test_system_clock_is_epoch_millis(self):
        now = SystemClock().now_ms()
        # Between 2020 and 2100
        assert 1_577_836_800_000 < now < 4_102_444_800_000

    def test_fixed_clock_moves_only_when_told(self):
        clock = FixedClock(1000)
        assert clock.now_ms() == 1000
        clock.advance(500)
        assert clock.now_ms() == 1500
        clock.set(42)
        assert clock.now_ms() == 42
