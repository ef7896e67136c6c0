"""Tests for process liveness checks."""

import os
import sys
from unittest import mock

import pytest

from voxlock.core.liveness import is_process_alive, probe_process

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="signal-based probe")


@pytest.mark.unit
class TestProbeProcess:
    """Tests for probe_process function."""

    def test_current_process_is_alive(self) -> None:
        assert probe_process(os.getpid()) is True

    def test_exited_process_is_not_alive(self, dead_pid: int) -> None:
        """A reaped child's PID is reported dead."""
        assert probe_process(dead_pid) is False

    @pytest.mark.parametrize("pid", [0, -1, -12345])
    def test_non_positive_pid_is_not_alive(self, pid: int) -> None:
        assert probe_process(pid) is False

    def test_out_of_range_pid_is_not_alive(self) -> None:
        assert probe_process(2**70) is False

    @posix_only
    def test_permission_denied_means_alive(self) -> None:
        """Existence matters, not whether we may signal it."""
        with mock.patch("voxlock.core.liveness.os.kill", side_effect=PermissionError):
            assert probe_process(4242) is True

    @posix_only
    def test_unexpected_error_is_unknown(self) -> None:
        with mock.patch("voxlock.core.liveness.os.kill", side_effect=OSError(22, "EINVAL")):
            assert probe_process(4242) is None

    @posix_only
    def test_never_raises(self) -> None:
        with mock.patch("voxlock.core.liveness.os.kill", side_effect=RuntimeError("boom")):
            assert probe_process(4242) is None


@pytest.mark.unit
class TestIsProcessAlive:
    """Tests for is_process_alive function."""

    def test_alive(self) -> None:
        assert is_process_alive(os.getpid()) is True

    def test_dead(self, dead_pid: int) -> None:
        assert is_process_alive(dead_pid) is False

    def test_unknown_reported_as_not_alive(self) -> None:
        with mock.patch("voxlock.core.liveness.probe_process", return_value=None):
            assert is_process_alive(4242) is False
