"""Shared test fixtures for voxlock tests."""

import subprocess
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from voxlock.coordinator import set_coordinator


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval: float, function: Callable[[], None]) -> None:
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.function()

    @property
    def live(self) -> bool:
        return self.started and not self.cancelled


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def lock_dir(tmp_path: Path) -> Path:
    """Lock directory path inside a private temp dir (not created)."""
    return tmp_path / "voxlock-test.lock.d"


@pytest.fixture
def timers() -> list[FakeTimer]:
    """Every FakeTimer built by timer_factory, in creation order."""
    return []


@pytest.fixture
def timer_factory(timers: list[FakeTimer]) -> Callable[[float, Callable[[], None]], FakeTimer]:
    """Timer factory for CancellationRegistry that records its timers."""

    def _factory(interval: float, function: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(interval, function)
        timers.append(timer)
        return timer

    return _factory


@pytest.fixture
def dead_pid() -> int:
    """PID of a process that has already exited and been reaped."""
    proc = subprocess.Popen([sys.executable, "-c", "pass"])
    proc.wait()
    return proc.pid


@pytest.fixture(autouse=True)
def reset_coordinator() -> Generator[None, None, None]:
    """Drop the process-wide coordinator between tests."""
    set_coordinator(None)
    yield
    set_coordinator(None)
