import time

import pytest

from monitors.errors import LaunchError
from monitors.executor import run_command


def test_captures_stdout():
    out = run_command("echo temp=45.6\\'C")
    assert out.returncode == 0
    assert out.text == "temp=45.6'C\n"


def test_pipeline():
    assert run_command("printf ' 42%%\\n' | tail -1").text.strip() == "42%"


def test_non_zero_exit():
    with pytest.raises(LaunchError) as info:
        run_command("echo oops >&2; exit 3")
    assert info.value.returncode == 3
    assert info.value.stderr.strip() == b"oops"
    assert "oops" in str(info.value)


def test_missing_command():
    with pytest.raises(LaunchError) as info:
        run_command("definitely-not-a-real-probe-command")
    assert info.value.returncode == 127


def test_timeout_kills_children():
    start = time.monotonic()
    with pytest.raises(LaunchError, match="timed out"):
        run_command("sleep 30 | cat", timeout=0.5)
    assert time.monotonic() - start < 10
