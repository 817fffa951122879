# src/musicroom/core/errors.py


class MusicRoomError(Exception):
    """Base application error for MusicRoom.

    Raised for structural problems that must stop the current operation:
    the CLI catches it and prints the message. Recoverable problems are
    logged as warnings and reported through a sentinel return instead.
    """

    pass


class MissingRootError(MusicRoomError):
    """The environment variable naming the room directory is not set."""


class RootDirectoryError(MusicRoomError):
    """The room directory is missing or cannot be written."""


class ConfigFileError(MusicRoomError):
    """The configuration file cannot be read as a whole."""


class VersionMismatchError(ConfigFileError):
    """The configuration file was written for a different version."""


class AlreadyConfiguredError(MusicRoomError):
    pass


class NotConfiguredError(MusicRoomError):
    pass


class PhaseError(MusicRoomError):
    """The lifecycle is in a state no caller should be able to observe."""


class SchemaError(MusicRoomError):
    pass


class PartError(MusicRoomError):
    """A database part is not open or cannot be opened."""
