"""Content items and the host collaborators the engine depends on."""

import time
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import httpx

from expiring_messages import __version__
from expiring_messages.errors import DeletionError

# Post type that tells renderers to show an expiry countdown
EXPIRING_CONTENT_TYPE = "custom_expiring"


@dataclass
class ContentItem:
    """A unit of content (a post) as seen by the content hooks."""

    id: str
    props: dict[str, Any] | None = field(default_factory=dict)
    type: str = ""


@runtime_checkable
class ContentDeleter(Protocol):
    """Permanently removes content items."""

    def delete(self, content_id: str) -> None:
        """Delete a content item.

        Must treat an already-deleted item as success. Raises DeletionError
        on any other failure.
        """
        ...


class Clock(Protocol):
    def now_ms(self) -> int: ...


class SystemClock:
    """Wall clock in epoch milliseconds."""

    def now_ms(self) -> int:
        return time.time_ns() // 1_000_000


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now_ms: int) -> None:
        self._now_ms = now_ms

    def now_ms(self) -> int:
        return self._now_ms

    def set(self, now_ms: int) -> None:
        self._now_ms = now_ms

    def advance(self, ms: int) -> None:
        self._now_ms += ms


class HttpContentDeleter:
    """Deletes posts through the content server's REST API.

    Issues DELETE /api/v4/posts/{id}?permanent=true so no "(message deleted)"
    placeholder is left behind. A 404 means the post is already gone and is
    treated as success, which keeps late or duplicate sweeps harmless.
    """

    def __init__(
        self,
        server_url: str,
        access_token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the deleter.

        Args:
            server_url: Base URL of the content server (e.g., http://localhost:8065)
            access_token: Bearer token of an account allowed to delete posts
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.server_url = server_url.rstrip("/")

        headers = {"User-Agent": f"expiring-messages/{__version__}"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout),
            headers=headers,
            transport=transport,
        )

    def delete(self, content_id: str) -> None:
        try:
            response = self._client.delete(
                f"{self.server_url}/api/v4/posts/{content_id}",
                params={"permanent": "true"},
            )
        except httpx.HTTPError as e:
            raise DeletionError(content_id, f"request failed: {e}") from e

        if response.status_code == 404:
            return
        if response.status_code >= 400:
            raise DeletionError(
                content_id,
                f"server returned {response.status_code} - {response.text}",
            )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()
