"""Expiring Messages configuration module.

Provides centralized configuration management using pydantic-settings.

Usage:
    from expiring_messages.config import get_settings, load_plugin_configuration

    settings = get_settings()
    snapshot = load_plugin_configuration(settings)
    print(snapshot.allowed_durations)
"""

from functools import lru_cache

from expiring_messages.config.plugin_config import (
    ConfigurationHolder,
    ConfigurationLoader,
    PluginConfiguration,
    load_plugin_configuration,
    load_yaml_configuration,
)
from expiring_messages.config.settings import DEFAULT_DURATIONS, Settings

__all__ = [
    "DEFAULT_DURATIONS",
    "ConfigurationHolder",
    "ConfigurationLoader",
    "PluginConfiguration",
    "Settings",
    "get_settings",
    "load_plugin_configuration",
    "load_yaml_configuration",
    "settings_loader",
]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    To reload settings, call get_settings.cache_clear() first.

    Returns:
        Settings instance loaded from environment variables.
    """
    return Settings()


def settings_loader() -> PluginConfiguration:
    """Configuration loader that re-reads the environment on every call.

    Used as the default loader for configuration change notifications.
    """
    get_settings.cache_clear()
    return load_plugin_configuration(get_settings())
