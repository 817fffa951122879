"""
Database management using the built-in `sqlite3` module.

MusicRoom keeps its data in one or more "parts", independent databases that
each live in their own file under the room directory. The file name of a part
comes from the `<part>_db_name` configuration key and the backend from
`db_type`. The tables of a part are never hard-coded here: `create_part`
builds them from the context's `SchemaProvider`.

The generic primitives (`select`, `insert`, `execute`, `quote`) log and return
a sentinel on bad input or a rejected statement, and raise `PartError` only
when asked to use a part that is not open.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional, Sequence

from .errors import PartError

if TYPE_CHECKING:
    from .context import RoomContext

logger = logging.getLogger(__name__)


def _connect_sqlite(path: Path) -> sqlite3.Connection:
    # isolation_level=None: every statement commits on its own
    return sqlite3.connect(path, isolation_level=None)


# db_type (case-insensitive) -> connect function
BACKENDS: dict[str, Callable[[Path], Any]] = {
    "sqlite": _connect_sqlite,
}


@dataclass
class PartHandle:
    """A live connection to one part."""

    name: str
    path: Path
    connection: sqlite3.Connection


class Database:
    """The set of parts opened through one `RoomContext`."""

    def __init__(self, context: "RoomContext"):
        self.context = context
        self._parts: dict[str, PartHandle] = {}

    # --- Connection management ---

    def part_path(self, part: str) -> Path:
        """Resolve the backing file of a part from the configuration."""
        db_name = self.context.raw_conf(f"{part}_db_name")
        if not db_name:
            raise PartError(f"Cannot find db_name for \"{part}\" (no {part}_db_name setting)")
        return Path(self.context.root_dir) / db_name

    def is_open(self, part: str) -> bool:
        return part in self._parts

    @property
    def open_parts(self) -> list[str]:
        return sorted(self._parts)

    def open_part(self, part: str) -> PartHandle:
        """Open (or reopen) a part, replacing any existing connection to it."""
        path = self.part_path(part)
        db_type = self.context.raw_conf("db_type") or ""
        connect = BACKENDS.get(db_type.lower())
        if connect is None:
            raise PartError(f"Unsupported db_type \"{db_type}\" for part \"{part}\"")

        old = self._parts.pop(part, None)
        if old is not None:
            old.connection.close()

        try:
            conn = connect(path)
        except sqlite3.Error as e:
            raise PartError(f"Cannot open database \"{part}\" at {path}: {e}") from e
        handle = PartHandle(name=part, path=path, connection=conn)
        self._parts[part] = handle
        logger.debug("Opened part %s at %s", part, path)
        return handle

    def table_statements(self, part: str) -> list[tuple[str, str]]:
        """(table, CREATE TABLE statement) pairs for every table of a part.

        Raises:
            SchemaError: a table has neither an id nor a name column.
        """
        schema = self.context.schema
        statements = []
        for table in schema.list_physical_tables(part):
            key = schema.primary_key(part, table)
            cols = [
                f'"{col}" {schema.get_physical_column(part, table, col)}'
                for col in schema.get_physical_columns(part, table)
            ]
            statements.append(
                (table, f'CREATE TABLE "{table}" ( {", ".join(cols)}, PRIMARY KEY ( "{key}" ) );')
            )
        return statements

    def create_part(self, part: str) -> list[str]:
        """Create the physical tables of a part as described by the schema.

        Every table is checked for an identifying column before any statement
        is issued. A table the backend refuses to create is logged and skipped.
        The part is closed afterwards; callers reopen it when they need it.

        Returns:
            The names of the tables that were created.
        """
        statements = self.table_statements(part)

        handle = self.open_part(part)
        created = []
        try:
            for table, stmt in statements:
                try:
                    handle.connection.execute(stmt)
                except sqlite3.Error as e:
                    logger.warning("Failed to create table %s in %s: %s", table, part, e)
                    continue
                created.append(table)
        finally:
            self.shutdown_part(part)
        return created

    def shutdown_part(self, part: Optional[str] = None) -> None:
        """Close one part, or every open part when `part` is None.

        Closing a part that is not open does nothing.
        """
        if part is None:
            for name in list(self._parts):
                self.shutdown_part(name)
            return
        handle = self._parts.pop(part, None)
        if handle is not None:
            handle.connection.close()
            logger.debug("Closed part %s", part)

    def shutdown_all(self) -> None:
        self.shutdown_part(None)

    # --- Generic operations ---

    def _connection(self, part: str) -> sqlite3.Connection:
        self.context.require_active()
        handle = self._parts.get(part)
        if handle is None:
            raise PartError(f"Must open database \"{part}\" before attempting to use it")
        return handle.connection

    def select(
        self,
        part: str,
        table: str,
        columns: Sequence[str],
        where: Optional[str] = None,
    ) -> Optional[Iterator[list]]:
        """Run `SELECT <columns> FROM <table> [WHERE <where>]`.

        Returns an iterator of rows, each a list in the order of `columns`.
        A statement the backend rejects gives an empty iterator, the same as
        a query with no matching rows. Returns None if `columns` is not a
        non-empty list of names.
        """
        conn = self._connection(part)
        if isinstance(columns, str) or not isinstance(columns, (list, tuple)):
            logger.warning("Must supply a list of column names to select from %s", table)
            return None
        if not columns:
            logger.warning("Must supply at least one column to select from %s", table)
            return None

        stmt = f"SELECT {','.join(columns)} FROM {table}"
        if where:
            stmt += f" WHERE {where}"
        stmt += ";"

        try:
            cursor = conn.execute(stmt)
        except sqlite3.Error as e:
            logger.warning("Failed to prepare \"%s\": %s", stmt, e)
            return iter(())
        return (list(row) for row in cursor)

    def insert(
        self,
        part: str,
        table: str,
        columns: Sequence[str],
        values: Sequence[Any],
    ) -> Optional[bool]:
        """Insert one row. Returns True when exactly one row was added, else None."""
        conn = self._connection(part)
        if isinstance(columns, str) or not isinstance(columns, (list, tuple)):
            logger.warning("Must supply a list of column names to insert into %s", table)
            return None
        if isinstance(values, str) or not isinstance(values, (list, tuple)):
            logger.warning("Must supply a list of values to insert into %s", table)
            return None
        if not columns:
            logger.warning("Must supply at least one column to insert into %s", table)
            return None
        if len(columns) != len(values):
            logger.warning("Supplied %d values for %d slots in %s", len(values), len(columns), table)
            return None

        quoted = [self.quote(part, value) for value in values]
        if None in quoted:
            return None
        stmt = f"INSERT INTO {table} ({','.join(columns)}) VALUES ({','.join(quoted)});"
        try:
            count = conn.execute(stmt).rowcount
        except sqlite3.Error as e:
            logger.warning("Failed to run \"%s\": %s", stmt, e)
            return None
        if count != 1:
            logger.warning("Got return value of \"%s\" from \"%s\"", count, stmt)
            return None
        return True

    def execute(self, part: str, statement: str) -> Optional[int]:
        """Run a raw statement. Returns the number of rows affected, or None on failure."""
        conn = self._connection(part)
        try:
            return conn.execute(statement).rowcount
        except sqlite3.Error as e:
            logger.warning("Failed to run \"%s\": %s", statement, e)
            return None

    def quote(self, part: str, value: Any) -> Optional[str]:
        """Format a value as an SQL literal for the part's backend.

        The words true and false, in any case, always become quoted strings
        rather than being left to the backend. Returns None for values the
        backend cannot represent.
        """
        conn = self._connection(part)
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return f"'{value}'"
        try:
            return conn.execute("SELECT quote(?)", (value,)).fetchone()[0]
        except sqlite3.Error as e:
            logger.warning("Cannot quote %r: %s", value, e)
            return None
