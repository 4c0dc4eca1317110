"""CLI command modules for Expiring Messages."""

from expiring_messages.cli_commands.run import build_plugin, close_plugin

__all__ = ["build_plugin", "close_plugin"]
