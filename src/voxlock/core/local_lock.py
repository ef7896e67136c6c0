"""In-process fast-path lock.

Serializes speech operations inside one process before they contend for
the cross-process lock. Waiting is cancellable.
"""

import asyncio
import logging

from ..errors import OperationCancelled
from .cancellation import CancellationToken
from .release import Release, release_once

logger = logging.getLogger(__name__)


class LocalLock:
    """Cancellable wrapper around asyncio.Lock.

    Bound to the event loop that first contends for it, like asyncio.Lock.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()

    def locked(self) -> bool:
        return self._lock.locked()

    async def acquire(self, token: CancellationToken) -> Release:
        """Acquire the lock unless token fires first.

        Args:
            token: Cancellation token to honor while waiting

        Returns:
            Release callable that must be invoked exactly once

        Raises:
            OperationCancelled: If token fired before the lock was obtained
        """
        token.raise_if_cancelled()

        acquiring = asyncio.ensure_future(self._lock.acquire())
        watcher = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {acquiring, watcher}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            watcher.cancel()
            await self._abandon(acquiring)
            raise

        watcher.cancel()

        if acquiring in done and not token.cancelled:
            logger.debug("Local lock acquired")
            return release_once(self._lock.release, "Local lock")

        # Token fired; the acquire may still have won the race
        await self._abandon(acquiring)
        logger.debug("Local lock wait cancelled")
        raise OperationCancelled(token.reason)

    async def _abandon(self, acquiring: "asyncio.Future[bool]") -> None:
        """Stop a pending acquire, releasing the lock if it was obtained anyway."""
        acquiring.cancel()
        await asyncio.gather(acquiring, return_exceptions=True)
        if not acquiring.cancelled() and acquiring.exception() is None:
            self._lock.release()
