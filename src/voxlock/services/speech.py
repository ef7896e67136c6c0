"""External speech command runner.

Runs a speech command (say, espeak, ...) as an asyncio subprocess and
stops it promptly when the operation's token fires.
"""

import asyncio
import logging

from ..constants import GRACEFUL_SHUTDOWN_TIMEOUT
from ..core import CancellationToken, race
from ..errors import OperationCancelled, SpeechError

logger = logging.getLogger(__name__)


async def _stop_process(proc: asyncio.subprocess.Process, grace: float) -> None:
    """SIGTERM, then SIGKILL if the process ignores it."""
    if proc.returncode is not None:
        return
    logger.debug(f"Sending SIGTERM to speech process {proc.pid}")
    proc.terminate()
    try:
        await asyncio.wait_for(proc.wait(), timeout=grace)
    except TimeoutError:
        logger.warning(f"Speech process {proc.pid} ignored SIGTERM after {grace}s, killing")
        proc.kill()
        await proc.wait()


async def run_speech_command(
    cmd: list[str],
    token: CancellationToken,
    grace: float = GRACEFUL_SHUTDOWN_TIMEOUT,
) -> int:
    """Run a speech command until it exits or token fires.

    Args:
        cmd: Command and arguments
        token: Cancellation token for the operation
        grace: Seconds to wait after SIGTERM before SIGKILL

    Returns:
        The command's exit code (always 0)

    Raises:
        OperationCancelled: If token fired; the process has been stopped
        SpeechError: If the command is missing or exits non-zero
    """
    if not cmd:
        raise SpeechError("No speech command configured")
    token.raise_if_cancelled()

    logger.debug(f"Starting speech command: {' '.join(cmd)}")
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        raise SpeechError(f"Speech command not found: {cmd[0]}") from None
    except OSError as e:
        raise SpeechError(f"Failed to start {cmd[0]}: {e}") from e

    try:
        # communicate() drains stderr so a chatty command can't block on a full pipe
        _, stderr = await race(proc.communicate(), token)
    except OperationCancelled:
        logger.info(f"Speech command {cmd[0]} cancelled")
        await _stop_process(proc, grace)
        raise
    except asyncio.CancelledError:
        await _stop_process(proc, grace)
        raise

    if proc.returncode != 0:
        detail = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
        message = f"{cmd[0]} exited with code {proc.returncode}"
        raise SpeechError(f"{message}: {detail}" if detail else message)

    logger.debug(f"Speech command {cmd[0]} completed")
    return proc.returncode
