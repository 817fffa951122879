"""
Configuration commands for MusicRoom (`mr config`).

View and change the values stored in the room's `musicroom.conf`. Every
command needs a configured room; run `mr setup` first.
"""

import json

import typer
from rich.table import Table

from ..core.config import CONFIG_VARS
from .common import console, room_session

app = typer.Typer(
    no_args_is_help=True,
    help="View and change the room configuration.",
)


@app.command("show")
def config_show(
    json_out: bool = typer.Option(False, "--json", help="Output machine-readable JSON"),
):
    """Display every configuration value."""
    with room_session() as ctx:
        values = ctx.as_dict()
        if json_out:
            typer.echo(json.dumps({"dir": ctx.root_dir, "config": values}, indent=2, sort_keys=True))
            return

        table = Table(title=f"MusicRoom configuration ({ctx.conf_file})")
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        table.add_column("Kind", style="dim")
        for key in sorted(values):
            var = CONFIG_VARS.get(key)
            table.add_row(key, values[key], var.kind.value if var else "-")
        console.print(table)


@app.command("get")
def config_get(key: str = typer.Argument(..., help="Configuration key (or 'dir').")):
    """Print a single configuration value."""
    with room_session() as ctx:
        value = ctx.get_conf(key)
        if value is None:
            raise typer.Exit(1)
        typer.echo(value)


@app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Configuration key to change."),
    value: str = typer.Argument(..., help="New value."),
):
    """Change a configuration value and rewrite the configuration file."""
    with room_session() as ctx:
        if not ctx.set_conf(key, value):
            console.print(f"[red]Could not set {key}.[/red]")
            raise typer.Exit(1)
        console.print(f"[green]✅ {key} set to[/green] [blue]{ctx.get_conf(key)}[/blue]")


@app.command("path")
def config_path():
    """Show the room directory and the configuration file location."""
    with room_session(require_active=False) as ctx:
        console.print("[bold]Current Paths:[/bold]")
        console.print(f"  Room:          [blue]{ctx.root_dir}[/blue]")
        console.print(f"  Configuration: [blue]{ctx.conf_file}[/blue]")
        if ctx.is_active():
            for key in ("coverart_subdir", "lyrics_subdir", "tools_dir"):
                console.print(f"  {key + ':':<15}[blue]{ctx.resolve_path(key) or '-'}[/blue]")
        else:
            console.print("[yellow]Not configured yet; run `mr setup`.[/yellow]")
