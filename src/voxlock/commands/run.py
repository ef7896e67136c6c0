"""Run and say commands: speak while holding the sequential lock."""

import asyncio
import contextlib
import signal

import typer

from ..constants import EXIT_CANCELLED, EXIT_FAILED, EXIT_LOCK_ERROR
from ..coordinator import Coordinator, get_coordinator
from ..core import CancellationToken, extract_request_id
from ..errors import LockError
from ..models import OutcomeStatus, SpeechResult
from ..output import get_output_context
from ..services import run_speech_command

_EXIT_CODES = {
    OutcomeStatus.COMPLETED: 0,
    OutcomeStatus.CANCELLED: EXIT_CANCELLED,
    OutcomeStatus.FAILED: EXIT_FAILED,
}


async def execute_speech(
    coordinator: Coordinator,
    request_id: str,
    cmd: list[str],
    message: str,
) -> SpeechResult:
    """Run cmd under the sequential lock; Ctrl-C cancels it.

    Args:
        coordinator: Coordinator holding the lock and registry
        request_id: Correlation id for the request
        cmd: Speech command to run
        message: Completion message reported on success

    Returns:
        Outcome of the request
    """
    interrupt = CancellationToken()
    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, interrupt.cancel, "interrupted")

    async def _speak(token: CancellationToken) -> str:
        await run_speech_command(cmd, token)
        return message

    try:
        return await coordinator.run_exclusive(request_id, _speak, parent=interrupt)
    finally:
        with contextlib.suppress(NotImplementedError):
            loop.remove_signal_handler(signal.SIGINT)
        coordinator.shutdown()


def _run_and_report(request_id: str, cmd: list[str], message: str) -> None:
    ctx = get_output_context()
    coordinator = get_coordinator()

    try:
        result = asyncio.run(execute_speech(coordinator, request_id, cmd, message))
    except LockError as e:
        ctx.error(str(e))
        raise typer.Exit(EXIT_LOCK_ERROR) from None

    ctx.speech_result(result)
    exit_code = _EXIT_CODES[result.status]
    if exit_code:
        raise typer.Exit(exit_code)


def run(
    command: list[str] = typer.Argument(
        ...,
        help="Command to run while holding the lock (put it after --)",
    ),
    request_id: str | None = typer.Option(
        None,
        "--id",
        help="Request ID for cancellation (generated if omitted)",
    ),
) -> None:
    """Run a sound-producing command, one at a time across the host."""
    rid = extract_request_id("run", request_id)
    _run_and_report(rid, command, "Command completed")


def say(
    text: str = typer.Argument(..., help="Text to speak"),
    voice: str | None = typer.Option(None, "--voice", help="Voice passed to the speech command"),
    rate: int | None = typer.Option(None, "--rate", help="Speaking rate (words per minute)"),
    request_id: str | None = typer.Option(
        None,
        "--id",
        help="Request ID for cancellation (generated if omitted)",
    ),
) -> None:
    """Speak text with the configured speech command."""
    ctx = get_output_context()
    if not text.strip():
        ctx.error("Empty text provided")
        raise typer.Exit(EXIT_FAILED)

    speech = get_coordinator().config.speech
    cmd = list(speech.command)
    if rate is not None:
        cmd += [speech.rate_flag, str(rate)]
    if voice:
        cmd += [speech.voice_flag, voice]
    cmd.append(text)

    message = "Speech completed" if speech.suppress_output else f"Speaking: {text}"
    _run_and_report(extract_request_id("say", request_id), cmd, message)
