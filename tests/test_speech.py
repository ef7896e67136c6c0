"""Tests for the speech command runner and playback waiter."""

import asyncio
import sys
import time
from unittest.mock import MagicMock

import pytest

from voxlock.core import CancellationToken
from voxlock.errors import OperationCancelled, SpeechError
from voxlock.services import run_speech_command, wait_for_playback


@pytest.mark.asyncio
@pytest.mark.unit
class TestRunSpeechCommand:
    """Tests for run_speech_command."""

    async def test_success(self) -> None:
        code = await run_speech_command([sys.executable, "-c", "pass"], CancellationToken())
        assert code == 0

    async def test_nonzero_exit_includes_stderr(self) -> None:
        cmd = [sys.executable, "-c", "import sys; sys.stderr.write('no voice'); sys.exit(2)"]
        with pytest.raises(SpeechError, match="exited with code 2: no voice"):
            await run_speech_command(cmd, CancellationToken())

    async def test_missing_command(self) -> None:
        with pytest.raises(SpeechError, match="not found"):
            await run_speech_command(["voxlock-no-such-speaker"], CancellationToken())

    async def test_empty_command(self) -> None:
        with pytest.raises(SpeechError, match="No speech command"):
            await run_speech_command([], CancellationToken())

    async def test_cancelled_token_never_starts(self) -> None:
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelled):
            await run_speech_command(["voxlock-no-such-speaker"], token)

    async def test_cancel_stops_process_promptly(self) -> None:
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.2, token.cancel, "stop")
        cmd = [sys.executable, "-c", "import time; time.sleep(30)"]

        start = time.monotonic()
        with pytest.raises(OperationCancelled):
            await run_speech_command(cmd, token, grace=2.0)
        assert time.monotonic() - start < 10


@pytest.mark.asyncio
@pytest.mark.unit
class TestWaitForPlayback:
    """Tests for wait_for_playback."""

    async def test_returns_when_done(self) -> None:
        done = asyncio.Event()
        sink = MagicMock()
        asyncio.get_running_loop().call_later(0.01, done.set)

        await asyncio.wait_for(wait_for_playback(done, sink, CancellationToken()), timeout=1.0)
        sink.clear.assert_not_called()

    async def test_cancel_clears_sink(self) -> None:
        done = asyncio.Event()
        sink = MagicMock()
        token = CancellationToken()
        asyncio.get_running_loop().call_later(0.01, token.cancel)

        with pytest.raises(OperationCancelled):
            await asyncio.wait_for(wait_for_playback(done, sink, token), timeout=1.0)
        sink.clear.assert_called_once_with()
