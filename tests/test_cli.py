import json
import sqlite3

from typer.testing import CliRunner

from musicroom.cli import app

runner = CliRunner()

SETUP = ["setup", "--set", "room_name=My Library", "--set", "tools_dir=tools"]


def test_help_lists_commands():
    res = runner.invoke(app, ["--help"])
    assert res.exit_code == 0, res.output
    for name in ("setup", "config", "db"):
        assert name in res.output


def test_version():
    res = runner.invoke(app, ["--version"])
    assert res.exit_code == 0, res.output
    assert "0.40" in res.output


def test_unconfigured_room_is_reported(tmp_path):
    res = runner.invoke(app, ["config", "show"], env={"MUSICROOM_DIR": str(tmp_path)})
    assert res.exit_code == 1
    assert "mr setup" in res.output


def test_missing_root_is_reported(monkeypatch):
    monkeypatch.delenv("MUSICROOM_DIR", raising=False)
    res = runner.invoke(app, ["config", "show"])
    assert res.exit_code == 1
    assert "MUSICROOM_DIR" in res.output


def test_setup_then_config(tmp_path):
    env = {"MUSICROOM_DIR": str(tmp_path)}
    res = runner.invoke(app, SETUP, env=env)
    assert res.exit_code == 0, res.output
    assert (tmp_path / "musicroom.conf").is_file()

    res = runner.invoke(app, SETUP, env=env)
    assert res.exit_code == 1
    assert "already configured" in res.output

    res = runner.invoke(app, ["config", "get", "room_name"], env=env)
    assert res.exit_code == 0, res.output
    assert res.output.strip() == "My Library"

    res = runner.invoke(app, ["config", "set", "room_name", "Den"], env=env)
    assert res.exit_code == 0, res.output

    res = runner.invoke(app, ["config", "show", "--json"], env=env)
    assert res.exit_code == 0, res.output
    data = json.loads(res.output)
    assert data["config"]["room_name"] == "Den"
    assert data["config"]["version"] == "0.40"

    res = runner.invoke(app, ["config", "set", "nonsense", "x"], env=env)
    assert res.exit_code == 1


def test_setup_prompts_for_missing_values(tmp_path):
    env = {"MUSICROOM_DIR": str(tmp_path)}
    res = runner.invoke(app, ["setup"], env=env, input="Attic\n/opt/tools\n")
    assert res.exit_code == 0, res.output
    assert 'room_name="Attic"' in (tmp_path / "musicroom.conf").read_text(encoding="utf-8")


def test_config_path(tmp_path):
    env = {"MUSICROOM_DIR": str(tmp_path)}
    res = runner.invoke(app, ["config", "path"], env=env)
    assert res.exit_code == 0, res.output
    assert "Current Paths:" in res.output
    assert "Not configured yet" in res.output


def test_db_commands(tmp_path):
    env = {"MUSICROOM_DIR": str(tmp_path)}
    assert runner.invoke(app, SETUP, env=env).exit_code == 0

    res = runner.invoke(app, ["db", "tables"], env=env)
    assert res.exit_code == 0, res.output
    assert "artists" in res.output.split()

    res = runner.invoke(app, ["db", "insert", "artists", "id=1", "name=Kate Bush"], env=env)
    assert res.exit_code == 0, res.output

    res = runner.invoke(app, ["db", "select", "artists", "-c", "id", "-c", "name", "--json"], env=env)
    assert res.exit_code == 0, res.output
    assert json.loads(res.output) == [{"id": 1, "name": "Kate Bush"}]

    res = runner.invoke(app, ["db", "quote", "TRUE"], env=env)
    assert res.output.strip() == "'TRUE'"

    res = runner.invoke(app, ["db", "exec", "DELETE FROM artists"], env=env)
    assert res.exit_code == 0, res.output
    assert "1 row(s) affected" in res.output

    res = runner.invoke(app, ["db", "exec", "DELETE FROM nowhere"], env=env)
    assert res.exit_code == 1

    with sqlite3.connect(tmp_path / "mrm_core.dat") as conn:
        assert conn.execute("SELECT count(*) FROM artists").fetchone()[0] == 0
