"""Commands that run the scheduler, continuously or for a single tick."""

import asyncio
import json
import signal

import typer

from expiring_messages.config import Settings, get_settings, load_plugin_configuration
from expiring_messages.content import HttpContentDeleter
from expiring_messages.errors import ActivationError, StoreError
from expiring_messages.logging import get_logger, setup_logging
from expiring_messages.plugin import ExpiringMessagesPlugin
from expiring_messages.store import SQLiteStore

logger = get_logger(__name__)


def build_plugin(settings: Settings) -> ExpiringMessagesPlugin:
    """Wire the plugin to the SQLite store and the HTTP deleter."""
    store = SQLiteStore(settings.store_file)
    deleter = HttpContentDeleter(
        settings.server_url,
        access_token=settings.access_token,
        timeout=settings.request_timeout,
    )
    return ExpiringMessagesPlugin(
        store,
        deleter,
        loader=lambda: load_plugin_configuration(settings),
        settings=settings,
    )


def close_plugin(plugin: ExpiringMessagesPlugin) -> None:
    """Release the store connection and HTTP client opened by build_plugin."""
    plugin.queue.deleter.close()
    plugin.store.close()


async def _serve(plugin: ExpiringMessagesPlugin) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows: KeyboardInterrupt still ends asyncio.run
            pass

    await plugin.activate()
    try:
        await stop.wait()
    finally:
        await plugin.deactivate()


def run_command(
    interval: float = typer.Option(
        None,
        "--interval",
        "-i",
        help="Seconds between sweeps (default: from config)",
    ),
) -> None:
    """Run the expiration scheduler until interrupted."""
    settings = get_settings()
    if interval is not None:
        settings = settings.model_copy(update={"sweep_interval": interval})
    setup_logging(settings.log_level)

    try:
        plugin = build_plugin(settings)
    except StoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Sweeping {settings.store_file} every {settings.sweep_interval:g}s (Ctrl+C to stop)")
    try:
        asyncio.run(_serve(plugin))
    except ActivationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        pass
    finally:
        close_plugin(plugin)


def sweep_command(
    skip_cleanup: bool = typer.Option(
        False,
        "--skip-cleanup",
        help="Only sweep due entries, don't reap stale buckets",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output in JSON format",
    ),
) -> None:
    """Run a single sweep (and cleanup) now."""
    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        plugin = build_plugin(settings)
    except StoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    now = plugin.clock.now_ms()
    try:
        result = plugin.queue.sweep(now)
        removed = 0 if skip_cleanup else plugin.collector.cleanup(now)
    finally:
        close_plugin(plugin)

    data = {
        "examined": result.examined,
        "deleted": result.deleted,
        "failed": result.failed,
        "stale_removed": removed,
    }
    if output_json:
        typer.echo(json.dumps(data))
    else:
        typer.echo(
            f"Swept {result.examined} entries: {result.deleted} deleted, "
            f"{result.failed} failed, {removed} stale entries removed"
        )
