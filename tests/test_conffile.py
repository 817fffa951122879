import logging
from datetime import datetime

import pytest

from musicroom.core import conffile


def test_parse_quoted_entries():
    text = "version=\"0.40\"\nroom_name='My Library'\n"
    assert conffile.parse(text) == {"version": "0.40", "room_name": "My Library"}


@pytest.mark.parametrize(
    "line,expected",
    [
        ('key="has \' and | and /"', "has ' and | and /"),
        ("key='say \"hi\"'", 'say "hi"'),
        ("key=|a \"b\" 'c'|", "a \"b\" 'c'"),
        ("key=/a \"b\" 'c' |d|/", "a \"b\" 'c' |d|"),
        ("key=bare words here   ", "bare words here"),
        ("  key   =   \"spaced\"  ", "spaced"),
        ('key=""', ""),
    ],
)
def test_parse_delimiters(line, expected):
    assert conffile.parse(line) == {"key": expected}


def test_parse_skips_comments_blanks_and_ctrl_z():
    text = "# a comment\n\n   \n   # indented comment\nname=\"x\"\x1a\n\x1a"
    assert conffile.parse(text) == {"name": "x"}


def test_parse_bad_line_is_a_warning(caplog):
    with caplog.at_level(logging.WARNING):
        result = conffile.parse("good=\"1\"\nthis line is nonsense\nother='2'\n")
    assert result == {"good": "1", "other": "2"}
    assert "Cannot parse config line 2" in caplog.text


def test_parse_later_entries_win():
    assert conffile.parse("a=\"1\"\na=\"2\"\n") == {"a": "2"}


@pytest.mark.parametrize(
    "value,delim",
    [
        ("plain", '"'),
        ('has "double"', "'"),
        ("has \"double\" and 'single'", "|"),
        ("has \"double\" 'single' |pipe|", "/"),
    ],
)
def test_encode_picks_narrowest_delimiter(value, delim):
    assert conffile.encode_entry("k", value) == f"k={delim}{value}{delim}"


def test_value_with_all_delimiters_is_dropped(caplog):
    with caplog.at_level(logging.WARNING):
        text = conffile.serialize({"bad": "\" ' | /", "good": "fine"}, program="test")
    assert "bad=" not in text
    assert 'good="fine"' in text
    assert "Cannot save configuration value for bad" in caplog.text


def test_serialize_header_and_sorted_keys():
    text = conffile.serialize(
        {"zeta": "z", "alpha": "a"}, program="mr_setup", saved_at=datetime(2024, 5, 1, 12, 30)
    )
    lines = text.splitlines()
    assert lines[0] == "# Configuration file for MusicRoom"
    assert "2024-05-01 12:30:00" in lines[1]
    assert "mr_setup" in lines[2]
    assert [line for line in lines if not line.startswith("#")] == ['alpha="a"', 'zeta="z"']


def test_header_is_not_parsed_back():
    text = conffile.serialize({"a": "1"}, program="prog = 'x'")
    assert conffile.parse(text) == {"a": "1"}


def test_round_trip_values():
    values = {
        "plain": "My Library",
        "path": "C:/Music/Room",
        "quotes": "It's \"quoted\"",
        "pipes": "a|b \"c\" 'd'",
        "spaces": "  padded  ",
        "empty": "",
        "unicode": "Sigur Rós",
    }
    assert conffile.parse(conffile.serialize(values)) == values


def test_line_breaks_cannot_be_saved():
    assert conffile.encode_entry("k", "two\nlines") is None


def test_file_helpers(tmp_path):
    path = tmp_path / "musicroom.conf"
    conffile.write_config_file(path, {"version": "0.40", "room_name": "Den"}, program="t")
    assert path.read_text(encoding="utf-8").startswith("# Configuration file for MusicRoom")
    assert conffile.read_config_file(path) == {"version": "0.40", "room_name": "Den"}


def test_ctrl_z_cannot_be_saved(caplog):
    assert conffile.encode_entry("k", "x\x1ay") is None
    assert "Ctrl-Z" in caplog.text
    assert conffile.parse(conffile.serialize({"a": "x\x1ay", "b": "ok"})) == {"b": "ok"}
