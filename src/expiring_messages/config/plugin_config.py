"""Plugin configuration snapshots and their loaders.

The hooks and the scheduler never read Settings directly. They read an
immutable PluginConfiguration snapshot held by a ConfigurationHolder, which
is swapped wholesale whenever the host signals a configuration change.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from expiring_messages.config.settings import Settings
from expiring_messages.ttl.duration import parse_allow_list


class PluginConfiguration(BaseModel):
    """Immutable snapshot of the TTL policy."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    allowed_durations: tuple[str, ...] = ()

    @field_validator("allowed_durations", mode="before")
    @classmethod
    def split_durations(cls, v: Any) -> Any:
        """Accept a comma-separated string or a list; trim every entry."""
        if v is None:
            return ()
        if isinstance(v, str):
            return tuple(parse_allow_list(v))
        if isinstance(v, (list, tuple, set)):
            return tuple(parse_allow_list(",".join(str(item) for item in v)))
        return v


ConfigurationLoader = Callable[[], PluginConfiguration]


def load_yaml_configuration(path: Path) -> dict[str, Any]:
    """Read plugin configuration overrides from a YAML file.

    Returns an empty dict if the file doesn't exist. Parse errors
    propagate so the host sees a failed configuration change.
    """
    if not path.exists():
        return {}

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Plugin configuration in {path} must be a mapping")
    return {k: v for k, v in data.items() if k in ("enabled", "allowed_durations")}


def load_plugin_configuration(settings: Settings) -> PluginConfiguration:
    """Build a configuration snapshot from settings and the optional YAML file."""
    values: dict[str, Any] = {
        "enabled": settings.enabled,
        "allowed_durations": settings.allowed_durations,
    }
    if settings.config_path is not None:
        values.update(load_yaml_configuration(settings.config_path))
    return PluginConfiguration(**values)


class ConfigurationHolder:
    """Holds the current configuration snapshot.

    Readers take a reference to the current snapshot and use it for the
    whole operation; writers replace the reference under a lock.
    """

    def __init__(self, initial: PluginConfiguration | None = None) -> None:
        self._lock = threading.Lock()
        self._current = initial or PluginConfiguration()

    def get(self) -> PluginConfiguration:
        """Return the current snapshot."""
        return self._current

    def replace(self, configuration: PluginConfiguration) -> PluginConfiguration:
        """Swap in a new snapshot and return the previous one."""
        with self._lock:
            previous = self._current
            self._current = configuration
        return previous
