"""
Logical model of the MusicRoom databases.

The core never hard-codes tables. It asks a `SchemaProvider` which physical
tables a part has, which columns each table has and the storage type of each
column. `LogicalModel` is the provider shipped with MusicRoom: it is built from
a nested mapping, usually read from a TOML "object definition file":

    [core.artists]
    id = "INTEGER"
    name = "TEXT NOT NULL"

    [core.valid_songs]
    name = "TEXT"
    soundex = "TEXT"
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Mapping, Sequence

import toml

from .errors import SchemaError


class SchemaProvider(ABC):
    """Read-only description of the physical tables of every part."""

    @abstractmethod
    def list_physical_tables(self, part: str) -> Sequence[str]:
        pass

    @abstractmethod
    def get_physical_columns(self, part: str, table: str) -> Sequence[str]:
        """Column names of `table`, in declaration order."""
        pass

    @abstractmethod
    def get_physical_column(self, part: str, table: str, column: str) -> str:
        """Storage type specification of a column, e.g. ``"TEXT NOT NULL"``."""
        pass

    def primary_key(self, part: str, table: str) -> str:
        """Return the identifying column of a table.

        That is the column named `id` if there is one, otherwise the column
        named `name`.

        Raises:
            SchemaError: if the table has neither.
        """
        columns = list(self.get_physical_columns(part, table))
        if "id" in columns:
            return "id"
        if "name" in columns:
            return "name"
        raise SchemaError(f"Table \"{table}\" in part \"{part}\" must have an id or name column")


class LogicalModel(SchemaProvider):
    """A SchemaProvider backed by an in-memory `{part: {table: {column: spec}}}` mapping."""

    def __init__(self, parts: Mapping[str, Mapping[str, Mapping[str, str]]]):
        self._parts: dict[str, dict[str, dict[str, str]]] = {}
        for part, tables in parts.items():
            if not isinstance(tables, Mapping):
                raise SchemaError(f"Part \"{part}\" must be a table of tables")
            self._parts[part] = {}
            for table, columns in tables.items():
                if not isinstance(columns, Mapping) or not columns:
                    raise SchemaError(f"Table \"{table}\" in part \"{part}\" has no columns")
                self._parts[part][table] = {str(c): str(spec) for c, spec in columns.items()}

    @classmethod
    def from_file(cls, path: Path) -> "LogicalModel":
        """Load a model from a TOML object definition file."""
        try:
            data = toml.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, toml.TomlDecodeError) as e:
            raise SchemaError(f"Cannot load object definition file {path}: {e}") from e
        return cls(data)

    @property
    def parts(self) -> list[str]:
        return list(self._parts)

    def list_physical_tables(self, part: str) -> list[str]:
        return list(self._parts.get(part, {}))

    def get_physical_columns(self, part: str, table: str) -> list[str]:
        return list(self._table(part, table))

    def get_physical_column(self, part: str, table: str, column: str) -> str:
        columns = self._table(part, table)
        if column not in columns:
            raise SchemaError(f"No column \"{column}\" in table \"{table}\" of part \"{part}\"")
        return columns[column]

    def _table(self, part: str, table: str) -> dict[str, str]:
        try:
            return self._parts[part][table]
        except KeyError:
            raise SchemaError(f"No table \"{table}\" in part \"{part}\"") from None


# Built-in model used until an object definition file is configured
DEFAULT_MODEL = LogicalModel(
    {
        "core": {
            "artists": {
                "id": "INTEGER",
                "name": "TEXT NOT NULL",
                "sort_name": "TEXT",
                "soundex": "TEXT",
            },
            "albums": {
                "id": "INTEGER",
                "name": "TEXT NOT NULL",
                "artist_id": "INTEGER",
                "year": "TEXT",
            },
            "songs": {
                "id": "INTEGER",
                "name": "TEXT NOT NULL",
                "artist_id": "INTEGER",
                "lyrics_file": "TEXT",
            },
            "tracks": {
                "id": "INTEGER",
                "song_id": "INTEGER",
                "album_id": "INTEGER",
                "track_number": "INTEGER",
                "file": "TEXT",
                "format": "TEXT",
                "cover_art": "TEXT",
            },
            "zones": {
                "name": "TEXT",
                "description": "TEXT",
            },
            "valid_artists": {
                "name": "TEXT",
                "soundex": "TEXT",
            },
            "valid_songs": {
                "name": "TEXT",
                "soundex": "TEXT",
            },
            "valid_albums": {
                "name": "TEXT",
                "soundex": "TEXT",
            },
        }
    }
)
