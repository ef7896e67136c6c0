"""Sequential execution lock.

Composes the in-process lock and the cross-process lock into the single
acquire/release pair callers use before producing sound.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from .cancellation import CancellationToken
from .global_lock import GlobalLock
from .local_lock import LocalLock
from .release import Release, noop_release, release_once

logger = logging.getLogger(__name__)


class SequentialLock:
    """At most one holder per host, across tasks and processes.

    Acquires local then global; releases global then local, so another
    process can never win the global lock while this process still looks
    like the exclusive in-process holder.
    """

    def __init__(self, global_lock: GlobalLock, local_lock: LocalLock | None = None) -> None:
        self.global_lock = global_lock
        self.local_lock = local_lock or LocalLock()

    @property
    def enabled(self) -> bool:
        return self.global_lock.enabled

    async def acquire(self, token: CancellationToken) -> Release:
        """Acquire both locks.

        Args:
            token: Cancellation token honored while waiting on either lock

        Returns:
            Release callable that must be invoked exactly once

        Raises:
            OperationCancelled: If token fired while waiting
            LockError: If the global lock directory can't be created
        """
        if not self.enabled:
            return noop_release

        release_local = await self.local_lock.acquire(token)
        try:
            release_global = await self.global_lock.acquire(token)
        except BaseException:
            release_local()
            raise

        def _release() -> None:
            release_global()
            release_local()
            logger.debug("Sequential lock released")

        logger.debug("Sequential lock acquired")
        return release_once(_release, "Sequential lock")

    @asynccontextmanager
    async def hold(self, token: CancellationToken) -> AsyncIterator[None]:
        """Hold the lock for the duration of an async with block."""
        release = await self.acquire(token)
        try:
            yield
        finally:
            release()
