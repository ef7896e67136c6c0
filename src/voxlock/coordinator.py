"""Sequential execution coordinator.

Entry point for the rest of the system: acquire_sequential() for the
lock, and run_cancellable()/run_exclusive() for operations that can be
cancelled by id while they wait for, or hold, the lock.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .config import VoxlockConfig
from .core import (
    CancellationRegistry,
    CancellationToken,
    GlobalLock,
    Release,
    SequentialLock,
    linked_token,
)
from .errors import OperationCancelled, RegistryFullError, SpeechError
from .models import SpeechResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[CancellationToken], Awaitable[T]]


class Coordinator:
    """Owns the sequential lock and the cancellation registry of one process."""

    def __init__(
        self,
        config: VoxlockConfig | None = None,
        *,
        sequential: SequentialLock | None = None,
        registry: CancellationRegistry | None = None,
    ) -> None:
        self.config = config or VoxlockConfig()
        coord = self.config.coordinator
        reg = self.config.registry
        self.sequential = sequential or SequentialLock(
            GlobalLock(
                coord.lock_dir,
                enabled=coord.sequential,
                stale_grace_seconds=coord.stale_grace_seconds,
                retry_min_ms=coord.retry_min_ms,
                retry_max_ms=coord.retry_max_ms,
            )
        )
        self.registry = registry or CancellationRegistry(
            max_requests=reg.max_requests,
            cleanup_timeout=reg.cleanup_timeout_seconds,
            max_id_length=reg.max_id_length,
            max_reason_length=reg.max_reason_length,
        )

    async def acquire_sequential(self, token: CancellationToken) -> Release:
        """Acquire the composed lock. See SequentialLock.acquire()."""
        return await self.sequential.acquire(token)

    async def run_cancellable(
        self,
        request_id: str,
        operation: Operation[T],
        parent: CancellationToken | None = None,
    ) -> T:
        """Run operation so that registry.cancel(request_id) stops it.

        If the registry is full the operation still runs, only without
        cancel-by-id (parent cancellation still applies).

        Args:
            request_id: Correlation id to register under
            operation: Coroutine function receiving the operation's token
            parent: Optional token whose firing also cancels the operation

        Returns:
            Whatever operation returns
        """
        with linked_token(parent) as token:
            try:
                self.registry.register(request_id, token.cancel)
            except RegistryFullError as e:
                logger.warning(f"Running {request_id} without cancellation support: {e}")
                return await operation(token)

            try:
                logger.debug(f"Starting operation {request_id}")
                return await operation(token)
            finally:
                self.registry.complete(request_id)
                logger.debug(f"Finished operation {request_id}")

    async def run_exclusive(
        self,
        request_id: str,
        operation: Operation[str],
        parent: CancellationToken | None = None,
    ) -> SpeechResult:
        """Run a sound-producing operation under the sequential lock.

        The wait for the lock is cancellable by id as well as the
        operation itself.

        Args:
            request_id: Correlation id to register under
            operation: Coroutine function returning a completion message
            parent: Optional token whose firing also cancels the operation

        Returns:
            SpeechResult with status completed, cancelled or failed

        Raises:
            LockError: If the lock directory can't be created
        """

        async def _guarded(token: CancellationToken) -> str:
            async with self.sequential.hold(token):
                token.raise_if_cancelled()
                return await operation(token)

        try:
            message = await self.run_cancellable(request_id, _guarded, parent)
        except OperationCancelled as e:
            logger.info(f"Request {request_id} cancelled")
            return SpeechResult.cancelled(request_id, e.reason)
        except SpeechError as e:
            logger.error(f"Request {request_id} failed: {e}")
            return SpeechResult.failed(request_id, str(e))
        return SpeechResult.completed(request_id, message)

    def shutdown(self) -> None:
        """Cancel everything still registered. Call once at process teardown."""
        self.registry.shutdown()


_coordinator: Coordinator | None = None


def get_coordinator() -> Coordinator:
    """Get the process-wide coordinator, creating a default one if needed."""
    global _coordinator
    if _coordinator is None:
        _coordinator = Coordinator()
    return _coordinator


def set_coordinator(coordinator: Coordinator | None) -> None:
    """Replace the process-wide coordinator. Called by the CLI main callback."""
    global _coordinator
    _coordinator = coordinator
