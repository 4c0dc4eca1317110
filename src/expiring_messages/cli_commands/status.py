"""Status command for the expiration queue."""

import json
from datetime import datetime, timezone

import typer

from expiring_messages.config import get_settings
from expiring_messages.content import SystemClock
from expiring_messages.errors import StoreError
from expiring_messages.expiration import BucketGarbageCollector, ExpirationQueue, bucket_partition
from expiring_messages.logging import setup_logging
from expiring_messages.store import SQLiteStore


class _NoopDeleter:
    """Status never sweeps; the queue still needs a deleter."""

    def delete(self, content_id: str) -> None:
        raise RuntimeError("status command must not delete content")


def _format_partition(partition: int) -> str:
    """Format a bucket partition as a UTC minute."""
    dt = datetime.fromtimestamp(partition * 60, tz=timezone.utc)
    return dt.strftime("%Y-%m-%d %H:%M UTC")


def status_command(
    output_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output in JSON format",
    ),
) -> None:
    """Show scheduled expirations.

    Displays how many posts are scheduled per bucket, how many are due,
    and how many are past the retention horizon.
    """
    settings = get_settings()
    setup_logging(settings.log_level)

    try:
        store = SQLiteStore(settings.store_file)
    except StoreError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    queue = ExpirationQueue(store, _NoopDeleter(), page_size=settings.page_size)
    collector = BucketGarbageCollector(store, retention_hours=settings.retention_hours)

    now = SystemClock().now_ms()
    current = bucket_partition(now)
    cutoff = collector.cutoff_partition(now)
    buckets = queue.pending(max_pages=settings.cleanup_max_pages)
    store.close()

    total = sum(len(ids) for ids in buckets.values())
    due = sum(len(ids) for p, ids in buckets.items() if p <= current)
    stale = sum(len(ids) for p, ids in buckets.items() if p < cutoff)

    status_data = {
        "store": str(settings.store_file),
        "scheduled": total,
        "due": due,
        "stale": stale,
        "buckets": {str(p): len(ids) for p, ids in sorted(buckets.items())},
    }

    if output_json:
        typer.echo(json.dumps(status_data))
        return

    typer.echo("")
    typer.echo("Expiring Messages Status")
    typer.echo("------------------------")
    typer.echo(f"Store: {settings.store_file}")
    typer.echo(f"Scheduled: {total} posts in {len(buckets)} buckets")
    typer.echo(f"Due: {due}")
    if stale > 0:
        typer.echo(f"Stale: {stale} (removed on next cleanup)")
    typer.echo("")

    for partition, ids in sorted(buckets.items()):
        typer.echo(f"  {_format_partition(partition)}  {len(ids)} post{'s' if len(ids) != 1 else ''}")
