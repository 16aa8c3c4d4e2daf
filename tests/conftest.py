import gc
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make the sources importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from softrefs.errors.handler import set_error_handler  # noqa: E402
from softrefs.pulse import PulseHub  # noqa: E402


@pytest.fixture(autouse=True)
def paused_gc():
    """Disable automatic collection so only explicit pulses reach listeners."""
    was_enabled = gc.isenabled()
    gc.disable()
    try:
        yield
    finally:
        if was_enabled:
            gc.enable()


@pytest.fixture(autouse=True)
def default_error_handler():
    previous = set_error_handler(None)
    try:
        yield
    finally:
        set_error_handler(previous)


@pytest.fixture
def hub():
    """Private hub, not attached to the collector; pulse it by hand."""
    return PulseHub()


@pytest.fixture
def pulse(hub):
    def _pulse(times: int = 1) -> None:
        for _ in range(times):
            hub.pulse()

    return _pulse
