"""Waiting on audio playback with cancellation.

Decoding and device output live elsewhere; anything that can report
"finished" and drop its pending buffer fits the AudioSink protocol.
"""

import asyncio
import logging
from typing import Protocol

from ..core import CancellationToken, race

logger = logging.getLogger(__name__)


class AudioSink(Protocol):
    """Audio output that can discard whatever it has not played yet."""

    def clear(self) -> None: ...


async def wait_for_playback(
    done: asyncio.Event,
    sink: AudioSink,
    token: CancellationToken,
) -> None:
    """Wait until playback signals done.

    On cancellation the sink is cleared so output stops immediately
    rather than playing out in the background.

    Raises:
        OperationCancelled: If token fired before playback finished
    """

    def _stop() -> None:
        logger.debug("Cancelled, clearing audio sink")
        sink.clear()

    await race(done.wait(), token, on_cancel=_stop)
    logger.debug("Audio playback completed")
