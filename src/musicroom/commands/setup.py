"""
Room setup for MusicRoom (`mr setup`).

Creates `musicroom.conf` and the core database in the directory named by
`MUSICROOM_DIR`. Values can be given up front with `--set key=value`;
anything still missing is asked for interactively.
"""

from typing import Optional

import typer
from rich.prompt import Prompt

from ..core.config import CONFIG_VARS, ConfigVar
from .common import console, room_session


def _parse_assignments(pairs: list[str]) -> dict[str, str]:
    values = {}
    for pair in pairs:
        if "=" not in pair:
            console.print(f"[red]Error: expected KEY=VALUE, got {pair!r}[/red]")
            raise typer.Exit(2)
        key, value = pair.split("=", 1)
        values[key.strip()] = value
    return values


def _ask(var: ConfigVar) -> str:
    return Prompt.ask(f"Define a value for [bold]{var.display_name}[/bold]", console=console)


def setup_room(
    assignments: Optional[list[str]] = typer.Option(
        None, "--set", "-s", help="Preset a configuration value as KEY=VALUE (repeatable)."
    ),
):
    """
    Configure MusicRoom in the room directory.

    Fails if the room has already been configured.
    """
    defaults = _parse_assignments(assignments or [])
    unknown = sorted(set(defaults) - set(CONFIG_VARS))
    if unknown:
        console.print(f"[yellow]Ignoring unknown settings: {', '.join(unknown)}[/yellow]")

    with room_session(require_active=False) as ctx:
        if not ctx.is_active():
            console.print("🎵 [bold]MusicRoom needs to be configured[/bold]")
        ctx.configure(defaults=defaults, prompt=_ask)
        console.print(f"[green]✅ Configuration written to {ctx.conf_file}[/green]")
        console.print(f"Room [blue]{ctx.get_conf('room_name')}[/blue] is ready.")
