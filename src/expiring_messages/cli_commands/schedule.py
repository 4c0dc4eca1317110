"""Manually schedule a post for expiration."""

import json

import typer

from expiring_messages.cli_commands.run import build_plugin, close_plugin
from expiring_messages.config import get_settings
from expiring_messages.content import ContentItem
from expiring_messages.errors import StoreError, ValidationError
from expiring_messages.logging import setup_logging
from expiring_messages.plugin import ExpiringMessagesPlugin
from expiring_messages.ttl import TTL_PROP_KEY


def _schedule(plugin: ExpiringMessagesPlugin, content_id: str, duration: str) -> int:
    """Validate the duration and write the expiration entry.

    Raises:
        typer.Exit: If the feature is off, the duration is rejected or the
            entry can't be written
    """
    plugin.on_config_change()
    config = plugin.configuration.get()
    if not config.enabled:
        typer.echo("Error: TTL is disabled in the plugin configuration", err=True)
        raise typer.Exit(1)

    item = ContentItem(id=content_id, props={TTL_PROP_KEY: {"enabled": True, "duration": duration}})
    decision = plugin.processor.process_create(item, config)
    try:
        decision.raise_for_reject()
    except ValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    expires_at = decision.expires_at
    if not plugin.queue.enqueue(content_id, expires_at):
        typer.echo("Error: failed to write the expiration entry", err=True)
        raise typer.Exit(1)
    return expires_at


def schedule_command(
    content_id: str = typer.Argument(..., help="ID of the post to expire"),
    duration: str = typer.Option(
        ...,
        "--duration",
        "-d",
        help="Time to live, e.g. 5m, 1h, 1d",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output in JSON format",
    ),
) -> None:
    """Schedule an existing post for deletion after DURATION.

    The duration is checked against the same allow-list as posted content.
    """
    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        plugin = build_plugin(settings)
    except StoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    try:
        expires_at = _schedule(plugin, content_id, duration)
    finally:
        close_plugin(plugin)

    if output_json:
        typer.echo(json.dumps({"content_id": content_id, "expires_at": expires_at}))
    else:
        typer.echo(f"Scheduled {content_id} to expire at {expires_at} (epoch ms)")
