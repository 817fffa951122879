"""MusicRoom - a toolkit for managing a personal digital music library."""

__version__ = "0.40"
