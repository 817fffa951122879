"""
The MusicRoom runtime context.

A `RoomContext` owns everything a MusicRoom process needs: the lifecycle phase,
the configuration map loaded from the room directory and the open database
parts. Nothing is stored at module level, so tests (or tools that manage
several rooms) can hold more than one context at a time.

Lifecycle:

    ctx = RoomContext()
    ctx.bootstrap()          # UNCONFIGURED if there is no musicroom.conf yet
    if not ctx.is_active():
        ctx.configure()      # asks questions, writes the file, creates the core part
    rows = ctx.db.select("core", "artists", ["id", "name"])

The phase only ever moves forward: UNCONFIGURED -> CONFIGURING -> ACTIVE.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Callable, Mapping, Optional

from rich.prompt import Prompt

from . import conffile
from .config import (
    CONF_FILE_NAME,
    CONFIG_VARS,
    CONFIG_VERSION,
    ConfigVar,
    flag_value,
    normalize_root,
    normalize_value,
    resolve_against_root,
    resolve_root_dir,
)
from .database import Database
from .errors import (
    AlreadyConfiguredError,
    ConfigFileError,
    MusicRoomError,
    NotConfiguredError,
    PhaseError,
    RootDirectoryError,
    VersionMismatchError,
)
from .schema import DEFAULT_MODEL, LogicalModel, SchemaProvider

logger = logging.getLogger(__name__)

CORE_PART = "core"


class Phase(str, Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURING = "configuring"
    ACTIVE = "active"


def ask_user(var: ConfigVar) -> str:
    """Default prompt used by `configure`."""
    return Prompt.ask(f"Define a value for \"{var.display_name}\"")


class RoomContext:
    """Configuration, lifecycle and databases of one music room."""

    def __init__(
        self,
        root_dir: Optional[str] = None,
        *,
        version: str = CONFIG_VERSION,
        schema: Optional[SchemaProvider] = None,
        config_vars: Optional[Mapping[str, ConfigVar]] = None,
    ):
        self.phase = Phase.UNCONFIGURED
        self.version = version
        self.config_vars = dict(config_vars if config_vars is not None else CONFIG_VARS)
        self._root_dir = normalize_root(root_dir) if root_dir is not None else None
        self._schema = schema
        self._model_cache: Optional[LogicalModel] = None
        self._config: dict[str, str] = {}
        self._ready_callbacks: list[Callable[["RoomContext"], None]] = []
        self.db = Database(self)

    # --- Paths ---

    @property
    def root_dir(self) -> str:
        """The room directory, with forward slashes and a trailing '/'."""
        if self._root_dir is None:
            self._root_dir = resolve_root_dir()
        return self._root_dir

    @property
    def conf_file(self) -> Path:
        return Path(self.root_dir + CONF_FILE_NAME)

    # --- Phase control ---

    def is_active(self) -> bool:
        return self.phase is Phase.ACTIVE

    def require_active(self) -> None:
        if self.phase is Phase.UNCONFIGURED:
            raise NotConfiguredError("Must configure MusicRoom before using it, run `mr setup`")
        if self.phase is not Phase.ACTIVE:
            raise PhaseError(f"Phase has bad value in MusicRoom ({self.phase.value})")

    def on_ready(self, callback: Callable[["RoomContext"], None]) -> None:
        """Call `callback(context)` once the context is active (now, if it already is)."""
        if self.is_active():
            callback(self)
        else:
            self._ready_callbacks.append(callback)

    def bootstrap(self) -> Phase:
        """Load the configuration file and open the core part.

        Without a configuration file the context stays UNCONFIGURED and the
        only useful next step is `configure()`.

        Raises:
            MissingRootError: the room directory is not set.
            ConfigFileError: the file cannot be read or has no version entry.
            VersionMismatchError: the file was written for another version.
        """
        if self.is_active():
            logger.warning("MusicRoom is already running; bootstrap ignored")
            return self.phase
        conf_file = self.conf_file
        if not conf_file.is_file():
            logger.debug("No configuration at %s", conf_file)
            return self.phase

        config = self._read_conf(conf_file)
        if "version" not in config:
            raise ConfigFileError(f"Missing version spec in {conf_file}")
        if config["version"] != self.version:
            raise VersionMismatchError(
                f"Configuration is for wrong version ({config['version']} not {self.version})"
            )
        self._config = config

        self.db.open_part(CORE_PART)
        self.phase = Phase.ACTIVE
        logger.debug("MusicRoom active in %s", self.root_dir)

        callbacks, self._ready_callbacks = self._ready_callbacks, []
        for callback in callbacks:
            callback(self)
        return self.phase

    def configure(
        self,
        defaults: Optional[Mapping[str, str]] = None,
        prompt: Optional[Callable[[ConfigVar], str]] = None,
    ) -> Phase:
        """Create a new room: write musicroom.conf and the core database.

        Args:
            defaults: Values that override the built-in defaults. A prompted
                variable given here is not asked for.
            prompt: Called with each prompted `ConfigVar` still missing a value;
                returns the value typed by the user. Defaults to a Rich prompt.

        Raises:
            AlreadyConfiguredError: the context is past UNCONFIGURED or the
                room already has a configuration file.
            RootDirectoryError: the room directory is missing or read-only.
        """
        if self.phase is not Phase.UNCONFIGURED:
            raise AlreadyConfiguredError("The MusicRoom system is already configured")

        root = self.root_dir
        if not os.path.isdir(root):
            raise RootDirectoryError(f"Cannot find directory {root} (from $MUSICROOM_DIR)")
        if not os.access(root, os.W_OK):
            raise RootDirectoryError(f"Do not have permission to write to {root}")
        if self.conf_file.exists():
            raise AlreadyConfiguredError(f"File {self.conf_file} already exists")

        self.phase = Phase.CONFIGURING
        prompt = prompt or ask_user
        supplied = dict(defaults or {})
        for key in supplied:
            if key not in self.config_vars:
                logger.warning("Ignoring unknown configuration variable %s", key)

        config: dict[str, str] = {}
        for key, var in self.config_vars.items():
            if key == "version":
                config[key] = self.version
            elif var.read_only and var.default is not None:
                config[key] = var.default
            elif key in supplied:
                config[key] = normalize_value(var, supplied[key])
            elif var.default is not None:
                config[key] = var.default

        pending = [var for key, var in sorted(self.config_vars.items()) if var.prompt and key not in config]
        if pending:
            logger.info("MusicRoom needs to be configured")
        for var in pending:
            config[var.key] = normalize_value(var, prompt(var))

        self._config = config
        # A schema without keys must not leave a half-written room behind
        self.db.table_statements(CORE_PART)
        self._save_conf()
        try:
            self.db.create_part(CORE_PART)
        except MusicRoomError:
            self.conf_file.unlink(missing_ok=True)
            raise

        return self.bootstrap()

    # --- Configuration access ---

    def raw_conf(self, key: str) -> Optional[str]:
        """Configuration lookup without the phase check, for use while configuring."""
        return self._config.get(key)

    def get_conf(self, key: str, silent: bool = False) -> Optional[str]:
        """Return a configuration value; the key "dir" gives the room directory."""
        self.require_active()
        if key.lower() == "dir":
            return self.root_dir
        if key not in self._config:
            if not silent:
                logger.warning("No value for configuration var \"%s\"", key)
            return None
        return self._config[key]

    def set_conf(self, key: str, value: str) -> bool:
        """Change one configuration value and rewrite the configuration file."""
        self.require_active()
        if key not in self._config:
            logger.warning("Cannot set configuration var \"%s\"", key)
            return False
        var = self.config_vars.get(key)
        if var is not None and var.read_only:
            logger.warning("Configuration var \"%s\" is read-only", key)
            return False
        value = normalize_value(var, value) if var is not None else str(value)
        if conffile.encode_entry(key, value) is None:
            return False
        self._config[key] = value
        if key == "object_file":
            self._model_cache = None
        self._save_conf()
        return True

    def as_dict(self) -> dict[str, str]:
        self.require_active()
        return dict(self._config)

    def resolve_path(self, key: str) -> Optional[Path]:
        """A path-valued setting, relative values anchored at the room directory."""
        value = self.get_conf(key)
        if not value:
            return None
        return resolve_against_root(value, self.root_dir)

    def get_flag(self, key: str) -> bool:
        return flag_value(self.get_conf(key, silent=True))

    def reload_conf(self) -> dict[str, str]:
        """Re-read musicroom.conf into the active configuration."""
        self.require_active()
        if not self.conf_file.is_file():
            raise ConfigFileError(f"Cannot find {self.conf_file}")
        self._config.update(self._read_conf(self.conf_file))
        self._model_cache = None
        return dict(self._config)

    @property
    def schema(self) -> SchemaProvider:
        """The injected schema, else the object definition file, else the built-in model."""
        if self._schema is not None:
            return self._schema
        object_file = self._config.get("object_file")
        if object_file:
            if self._model_cache is None:
                self._model_cache = LogicalModel.from_file(resolve_against_root(object_file, self.root_dir))
            return self._model_cache
        return DEFAULT_MODEL

    def close(self) -> None:
        self.db.shutdown_all()

    # --- Helpers ---

    def _read_conf(self, path: Path) -> dict[str, str]:
        try:
            return conffile.read_config_file(path)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigFileError(f"Cannot read {path}: {e}") from e

    def _save_conf(self) -> None:
        try:
            conffile.write_config_file(self.conf_file, self._config)
        except OSError as e:
            raise ConfigFileError(f"Cannot write to {self.conf_file}: {e}") from e
