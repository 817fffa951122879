"""
Reading and writing the `musicroom.conf` file.

The file holds one `key=value` entry per line. Values are wrapped in the first
delimiter, from a fixed priority list, that does not occur inside them, so no
escape sequences are ever needed:

    key="value with ' | / allowed"
    key='value with " allowed'
    key=|value with " ' allowed|
    key=/value with " ' | allowed/
    key=bare rest of line

A value that contains all four delimiters cannot be written. All knowledge of
this layout lives here so the quoting policy can be swapped without touching
callers.
"""

from __future__ import annotations

import logging
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# Priority order on both read and write
DELIMITERS = ('"', "'", "|", "/")

_KEY_RE = re.compile(r"^\w+$")
_QUOTED_RES = [
    re.compile(r"^\s*(\w+)\s*=\s*" + re.escape(d) + r"([^" + re.escape(d) + r"]*)" + re.escape(d))
    for d in DELIMITERS
]
_BARE_RE = re.compile(r"^\s*(\w+)\s*=\s*(\S.*?)\s*$")
_SKIP_RE = re.compile(r"^\s*(#.*)?$")


def choose_delimiter(value: str) -> Optional[str]:
    """Return the first delimiter absent from `value`, or None if all occur."""
    for delim in DELIMITERS:
        if delim not in value:
            return delim
    return None


def encode_entry(key: str, value: str) -> Optional[str]:
    """Format a single entry as a config line (without newline).

    Returns None, after logging a warning, when the entry cannot be
    represented in the file format.
    """
    if not _KEY_RE.match(key):
        logger.warning("Cannot save configuration key %r: keys must be word characters", key)
        return None
    if "\n" in value or "\r" in value:
        logger.warning("Cannot save configuration value for %s: line breaks are not allowed", key)
        return None
    if "\x1a" in value:
        logger.warning("Cannot save configuration value for %s: it contains a Ctrl-Z character", key)
        return None
    delim = choose_delimiter(value)
    if delim is None:
        logger.warning(
            "Cannot save configuration value for %s: it contains all of %s",
            key,
            " ".join(DELIMITERS),
        )
        return None
    return f"{key}={delim}{value}{delim}"


def decode_line(line: str) -> Optional[tuple[str, str]]:
    """Parse one non-comment line into (key, value), or None if it does not match."""
    for pattern in _QUOTED_RES:
        m = pattern.match(line)
        if m:
            return m.group(1), m.group(2)
    m = _BARE_RE.match(line)
    if m:
        return m.group(1), m.group(2)
    return None


def parse(text: str) -> dict[str, str]:
    """Parse the contents of a config file into a dict.

    Blank lines and `#` comments are skipped. A line that matches no entry
    form is logged and skipped; it does not fail the whole parse.
    """
    config: dict[str, str] = {}
    for lineno, raw in enumerate(text.split("\n"), start=1):
        line = raw.rstrip("\r").replace("\x1a", "")
        if _SKIP_RE.match(line):
            continue
        entry = decode_line(line)
        if entry is None:
            logger.warning("Cannot parse config line %d: %r", lineno, line)
            continue
        key, value = entry
        config[key] = value
    return config


def render_header(program: Optional[str] = None, saved_at: Optional[datetime] = None) -> str:
    saved_at = saved_at or datetime.now()
    program = program if program is not None else sys.argv[0]
    return (
        "# Configuration file for MusicRoom\n"
        f"#     Saved: {saved_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
        f"#   Program: {program}\n"
        "#\n"
    )


def serialize(
    config: Mapping[str, str],
    program: Optional[str] = None,
    saved_at: Optional[datetime] = None,
) -> str:
    """Render a mapping as config file text, keys in sorted order.

    Entries that cannot be represented are dropped with a warning.
    """
    lines = [render_header(program, saved_at)]
    for key in sorted(config):
        encoded = encode_entry(key, str(config[key]))
        if encoded is not None:
            lines.append(encoded + "\n")
    return "".join(lines)


def read_config_file(path: Path) -> dict[str, str]:
    """Read and parse a config file. I/O and decoding errors propagate."""
    with open(path, "r", encoding="utf-8") as fh:
        return parse(fh.read())


def write_config_file(path: Path, config: Mapping[str, str], program: Optional[str] = None) -> None:
    """Rewrite the whole config file from `config`."""
    text = serialize(config, program=program)
    with open(path, "w", encoding="utf-8", newline="\n") as fh:
        fh.write(text)
