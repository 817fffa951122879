"""Command groups for the MusicRoom CLI.

This package provides sub-apps that are mounted by musicroom.cli.
"""

from . import config as config  # noqa: F401
from . import db as db  # noqa: F401
from . import setup as setup  # noqa: F401

__all__ = [
    "config",
    "db",
    "setup",
]
