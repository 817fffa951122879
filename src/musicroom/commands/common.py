"""Helpers shared by the command modules."""

from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from rich.console import Console

from ..core.context import RoomContext
from ..core.errors import MusicRoomError

console = Console()


def fail(error: MusicRoomError) -> None:
    """Report a fatal error and stop the command."""
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@contextmanager
def room_session(root_dir: Optional[str] = None, *, require_active: bool = True) -> Iterator[RoomContext]:
    """Bootstrap a context for one command and close its parts afterwards.

    MusicRoomError raised inside the block is printed and turned into exit code 1.
    """
    ctx = RoomContext(root_dir)
    try:
        ctx.bootstrap()
        if require_active:
            ctx.require_active()
        yield ctx
    except MusicRoomError as e:
        fail(e)
    finally:
        ctx.close()
