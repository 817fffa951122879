"""
Configuration variables and room directory resolution.

The room directory is named by the `MUSICROOM_DIR` environment variable and is
read through Dynaconf (prefix `MUSICROOM`), so a `.env` file in the working
directory works as well as a real environment variable. Everything else lives
in the room's own `musicroom.conf` (see `conffile`).

`CONFIG_VARS` is the declarative table of known variables. Each entry is a
Pydantic `ConfigVar` describing its kind, default and whether `configure()`
has to ask the user for it.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from dynaconf import Dynaconf
from pydantic import BaseModel, ConfigDict

from .. import __version__
from .errors import MissingRootError

ROOT_ENV_VAR = "MUSICROOM_DIR"
CONF_FILE_NAME = "musicroom.conf"

# The configuration file must carry exactly this version
CONFIG_VERSION = __version__


class ValueKind(str, Enum):
    TEXT = "text"
    PATH = "path"
    FLAG = "flag"


class ConfigVar(BaseModel):
    """Description of a single configuration variable."""

    key: str
    kind: ValueKind = ValueKind.TEXT
    default: Optional[str] = None
    prompt: bool = False
    label: Optional[str] = None
    read_only: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def display_name(self) -> str:
        return self.label or self.key


CONFIG_VARS: dict[str, ConfigVar] = {
    var.key: var
    for var in (
        ConfigVar(key="version", default=CONFIG_VERSION, read_only=True),
        ConfigVar(key="data_location_file", default=".musicroom_dir"),
        ConfigVar(key="db_type", default="SQLite"),
        ConfigVar(key="core_db_name", default="mrm_core.dat"),
        ConfigVar(key="coverart_subdir", kind=ValueKind.PATH, default="art"),
        ConfigVar(key="lyrics_subdir", kind=ValueKind.PATH, default="lyrics"),
        ConfigVar(
            key="tools_dir",
            kind=ValueKind.PATH,
            prompt=True,
            label="Path to directory containing format conversion tools",
        ),
        ConfigVar(key="room_name", prompt=True, label="Music Library Name"),
        ConfigVar(key="object_file", kind=ValueKind.PATH, default="", label="Object Definition File"),
        ConfigVar(key="wav_disabled", kind=ValueKind.FLAG, default=""),
        ConfigVar(key="mp3_disabled", kind=ValueKind.FLAG, default=""),
    )
}

_TRUE_WORDS = {"1", "y", "yes", "true", "on"}


def normalize_root(path: str) -> str:
    """Use forward slashes and guarantee a trailing separator."""
    path = str(path).replace("\\", "/")
    if not path.endswith("/"):
        path += "/"
    return path


def resolve_root_dir() -> str:
    """Read the room directory from the environment.

    Raises:
        MissingRootError: if `MUSICROOM_DIR` is not set.
    """
    loader = Dynaconf(envvar_prefix="MUSICROOM", environments=False, load_dotenv=True)
    value = loader.get("DIR")
    if value is None or str(value) == "":
        raise MissingRootError(f"Must set environment variable {ROOT_ENV_VAR} to use MusicRoom")
    return normalize_root(str(value))


def normalize_value(var: ConfigVar, value: str) -> str:
    """Bring a user-supplied value into its stored form.

    PATH values use forward slashes; FLAG values are stored as "1" or "".
    TEXT values are kept exactly as given.
    """
    value = str(value)
    if var.kind is ValueKind.PATH:
        return value.strip().replace("\\", "/")
    if var.kind is ValueKind.FLAG:
        return "1" if value.strip().lower() in _TRUE_WORDS else ""
    return value


def resolve_against_root(value: str, root_dir: str) -> Path:
    """Anchor a relative path value at the room directory."""
    path = Path(value)
    if path.is_absolute() or (len(value) > 1 and value[1] == ":"):
        return path
    return Path(root_dir) / path


def flag_value(value: Optional[str]) -> bool:
    return bool(value) and value.strip().lower() in _TRUE_WORDS
