"""TTL descriptor stored in a content item's property bag."""

import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

TTL_PROP_KEY = "ttl"


class TTLDescriptor(BaseModel):
    """The `ttl` property of a content item.

    `enabled` is strict: a string "true" is not a boolean, and a descriptor
    with such a flag counts as absent. `duration` and `expires_at` are read
    leniently. A non-string duration reads as missing, so an enabled request
    is rejected for it. A non-numeric or non-finite expires_at reads as
    unset; the server
    recomputes it anyway. Unknown keys are kept so that writing the
    descriptor back does not drop client data.
    """

    model_config = ConfigDict(strict=True, extra="allow")

    enabled: bool | None = None
    duration: str | None = None
    expires_at: int | float | None = None

    @field_validator("duration", mode="before")
    @classmethod
    def drop_non_string_duration(cls, v: Any) -> Any:
        return v if isinstance(v, str) else None

    @field_validator("expires_at", mode="before")
    @classmethod
    def drop_non_numeric_expires_at(cls, v: Any) -> Any:
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
            return None
        return v

    @property
    def is_enabled(self) -> bool:
        return bool(self.enabled)

    @property
    def deadline(self) -> int:
        """Deadline in epoch milliseconds, 0 if none was recorded."""
        if self.expires_at is None:
            return 0
        return int(self.expires_at)

    def to_props(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def decode_descriptor(props: Mapping[str, Any] | None) -> TTLDescriptor | None:
    """Decode the TTL descriptor from a property bag.

    Returns None when the bag has no descriptor or when the value under the
    TTL key has the wrong shape. Never raises.
    """
    if not isinstance(props, Mapping):
        return None

    raw = props.get(TTL_PROP_KEY)
    if not isinstance(raw, Mapping):
        return None

    try:
        return TTLDescriptor.model_validate(dict(raw))
    except PydanticValidationError:
        return None


def previous_deadline(props: Mapping[str, Any] | None) -> int:
    """Return the recorded deadline of a bag's descriptor, or 0."""
    descriptor = decode_descriptor(props)
    if descriptor is None:
        return 0
    return descriptor.deadline
