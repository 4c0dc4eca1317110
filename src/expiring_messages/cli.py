"""Expiring Messages CLI - run and inspect the expiration engine."""

import typer

from expiring_messages import __version__
from expiring_messages.cli_commands.run import run_command, sweep_command
from expiring_messages.cli_commands.schedule import schedule_command
from expiring_messages.cli_commands.status import status_command

app = typer.Typer(
    name="expiring-messages",
    help="Expiring Messages - delete posts when their time-to-live runs out.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"expiring-messages {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Expiring Messages - time-to-live for posts."""
    pass


app.command(name="run")(run_command)
app.command(name="sweep")(sweep_command)
app.command(name="schedule")(schedule_command)
app.command(name="status")(status_command)


if __name__ == "__main__":
    app()
