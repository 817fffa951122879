"""
Database commands for MusicRoom (`mr db`).

Thin wrappers around the generic storage primitives, handy for inspecting a
room or poking at it from shell scripts.
"""

import json
from typing import Optional

import typer
from rich.table import Table

from ..core.context import CORE_PART
from .common import console, room_session

app = typer.Typer(
    no_args_is_help=True,
    help="Query and modify the room databases.",
)

PART_OPTION = typer.Option(CORE_PART, "--part", "-p", help="Database part to use.")


def _ensure_open(ctx, part: str) -> None:
    if not ctx.db.is_open(part):
        ctx.db.open_part(part)


@app.command("tables")
def db_tables(part: str = PART_OPTION):
    """List the tables that exist in a part."""
    with room_session() as ctx:
        _ensure_open(ctx, part)
        rows = ctx.db.select(part, "sqlite_master", ["name"], "type='table' ORDER BY name")
        for (name,) in rows or []:
            typer.echo(name)


@app.command("select")
def db_select(
    table: str = typer.Argument(..., help="Table to read."),
    columns: list[str] = typer.Option(..., "--column", "-c", help="Column to return (repeatable)."),
    where: Optional[str] = typer.Option(None, "--where", "-w", help="SQL WHERE clause."),
    part: str = PART_OPTION,
    json_out: bool = typer.Option(False, "--json", help="Output rows as JSON"),
):
    """Select rows from a table."""
    with room_session() as ctx:
        _ensure_open(ctx, part)
        rows = ctx.db.select(part, table, columns, where)
        if rows is None:
            raise typer.Exit(1)
        rows = list(rows)
        if json_out:
            typer.echo(json.dumps([dict(zip(columns, row)) for row in rows], indent=2))
            return
        out = Table(title=f"{part}.{table}")
        for col in columns:
            out.add_column(col)
        for row in rows:
            out.add_row(*["" if v is None else str(v) for v in row])
        console.print(out)
        console.print(f"{len(rows)} row(s)")


@app.command("insert")
def db_insert(
    table: str = typer.Argument(..., help="Table to add a row to."),
    assignments: list[str] = typer.Argument(..., help="COLUMN=VALUE pairs."),
    part: str = PART_OPTION,
):
    """Insert a single row."""
    columns, values = [], []
    for pair in assignments:
        if "=" not in pair:
            console.print(f"[red]Error: expected COLUMN=VALUE, got {pair!r}[/red]")
            raise typer.Exit(2)
        col, val = pair.split("=", 1)
        columns.append(col.strip())
        values.append(val)

    with room_session() as ctx:
        _ensure_open(ctx, part)
        if not ctx.db.insert(part, table, columns, values):
            console.print(f"[red]Insert into {table} failed.[/red]")
            raise typer.Exit(1)
        console.print(f"[green]✅ Added 1 row to {table}[/green]")


@app.command("exec")
def db_exec(
    statement: str = typer.Argument(..., help="SQL statement to run as-is."),
    part: str = PART_OPTION,
):
    """Run a raw SQL statement (deletes, updates, schema changes)."""
    with room_session() as ctx:
        _ensure_open(ctx, part)
        count = ctx.db.execute(part, statement)
        if count is None:
            console.print("[red]Statement failed.[/red]")
            raise typer.Exit(1)
        if count >= 0:
            console.print(f"{count} row(s) affected")


@app.command("quote")
def db_quote(
    value: str = typer.Argument(..., help="Value to quote."),
    part: str = PART_OPTION,
):
    """Show how a value is written as an SQL literal."""
    with room_session() as ctx:
        _ensure_open(ctx, part)
        typer.echo(ctx.db.quote(part, value))


@app.command("create")
def db_create(part: str = typer.Argument(..., help="Part to create (needs a <part>_db_name setting).")):
    """Create the tables of a part from the logical model."""
    with room_session() as ctx:
        created = ctx.db.create_part(part)
        for table in created:
            console.print(f"  [green]+[/green] {table}")
        console.print(f"Created {len(created)} table(s) in {part}")
