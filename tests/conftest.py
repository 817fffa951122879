import logging

import pytest

from musicroom.core.context import RoomContext


@pytest.fixture(autouse=True)
def _restore_root_logger():
    # `mr` reconfigures the root logger on every invocation
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def answers(**values):
    """A prompt callback that answers from keyword arguments."""
    return lambda var: values[var.key]


@pytest.fixture
def room(tmp_path):
    """An active room in a temporary directory."""
    ctx = RoomContext(str(tmp_path))
    ctx.configure(prompt=answers(room_name="My Library", tools_dir="tools"))
    yield ctx
    ctx.close()
