"""
MusicRoom CLI - Main entry point using Typer.

This module configures the main Typer application, registers all command groups,
and defines global options like --version and --verbose.
"""

import typer
from rich.console import Console
from rich.traceback import install

from .commands import config, db, setup
from .core.errors import MusicRoomError
from .core.logging_util import setup_logging

# Install a rich traceback handler for beautiful, readable exceptions
install(show_locals=False)

console = Console()

app = typer.Typer(
    name="mr",
    help="🎵 MusicRoom - configuration and storage for your digital music library.",
    epilog="The room directory is taken from $MUSICROOM_DIR. Use `mr [COMMAND] --help` for more info on a specific command.",
    no_args_is_help=True,
    pretty_exceptions_enable=False,  # Disable Typer's default handler to use Rich's
)

app.command("setup", help="🛠️ Configure a new room and create its databases.")(setup.setup_room)
app.add_typer(config.app, name="config", help="🔧 View and change the room configuration.")
app.add_typer(db.app, name="db", help="🗄️ Query and modify the room databases.")


@app.callback(invoke_without_command=True)
def main(
    version: bool = typer.Option(
        None,  # Use None as the default for a pure flag
        "--version",
        "-v",
        help="Show the application version and exit.",
        is_eager=True,  # Process this before any command
    ),
    verbose: bool = typer.Option(None, "--verbose", help="Enable DEBUG-level logging."),
    quiet: bool = typer.Option(
        None, "--quiet", help="Reduce logging to warnings and errors."
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Emit logs as JSON lines."
    ),
):
    """
    MusicRoom CLI - manage the configuration and databases of a music room.
    """
    if version:
        from . import __version__

        console.print(f"MusicRoom v{__version__}")
        raise typer.Exit()

    # Configure logging once, early
    setup_logging(json_logs=json_logs, verbose=bool(verbose), quiet=bool(quiet))


def cli():
    """Main entry point for the console script defined in pyproject.toml."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]👋 Operation cancelled by user.[/yellow]")
        raise typer.Exit()
    except MusicRoomError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    cli()
