"""Cooperative cancellation tokens.

A CancellationToken is a level-triggered flag: once cancelled it stays
cancelled, and checking it is always safe. Its cancel() method is the
trigger handed to the cancellation registry; any thread may call it.

Blocking steps are written as a race between normal completion and the
token firing, via race().
"""

import asyncio
import contextlib
import logging
import threading
from collections.abc import Awaitable, Callable, Iterator
from typing import TypeVar

from ..errors import OperationCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")

Callback = Callable[[], None]


class CancellationToken:
    """Thread-safe, level-triggered cancellation flag."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False
        self._reason: str | None = None
        self._callbacks: list[Callback] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> bool:
        """Fire the token.

        Returns:
            True if this call fired the token, False if it was already fired
        """
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled = True
            self._reason = reason
            callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Cancellation callback failed")
        return True

    def add_callback(self, callback: Callback) -> Callback:
        """Run callback when the token fires (immediately if it already has).

        Returns:
            A function that unregisters the callback
        """
        with self._lock:
            if not self._cancelled:
                self._callbacks.append(callback)
                return lambda: self._remove_callback(callback)
        callback()
        return lambda: None

    def _remove_callback(self, callback: Callback) -> None:
        with self._lock, contextlib.suppress(ValueError):
            self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelled(self._reason)

    async def wait(self) -> None:
        """Wait until the token fires."""
        if self._cancelled:
            return
        loop = asyncio.get_running_loop()
        fired: asyncio.Future[None] = loop.create_future()

        def _set() -> None:
            if not fired.done():
                fired.set_result(None)

        def _wake() -> None:
            # cancel() may run on any thread
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(_set)

        remove = self.add_callback(_wake)
        try:
            await fired
        finally:
            remove()


@contextlib.contextmanager
def linked_token(parent: CancellationToken | None = None) -> Iterator[CancellationToken]:
    """Create a token that also fires when parent fires.

    The link is dropped when the block exits so long-lived parents don't
    accumulate callbacks.
    """
    child = CancellationToken()
    if parent is None:
        yield child
        return
    remove = parent.add_callback(lambda: child.cancel(parent.reason))
    try:
        yield child
    finally:
        remove()


async def race(
    awaitable: Awaitable[T],
    token: CancellationToken,
    on_cancel: Callback | None = None,
) -> T:
    """Await awaitable unless token fires first.

    If the work finishes first its result (or exception) is returned,
    even when the token fired in the same loop iteration. Otherwise the
    work is cancelled, on_cancel runs, and OperationCancelled is raised.

    Args:
        awaitable: Work to wait for
        token: Token to race against
        on_cancel: Hook that stops externally visible side effects

    Raises:
        OperationCancelled: If the token fired before the work finished
    """
    work = asyncio.ensure_future(awaitable)
    if token.cancelled:
        work.cancel()
    watcher = asyncio.ensure_future(token.wait())

    try:
        done, _ = await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        watcher.cancel()
        raise

    if work in done and not work.cancelled():
        watcher.cancel()
        return work.result()

    work.cancel()
    watcher.cancel()
    if on_cancel is not None:
        try:
            on_cancel()
        except Exception:
            logger.exception("Cancellation cleanup failed")
    # Let the work observe its CancelledError before we report
    await asyncio.gather(work, return_exceptions=True)
    raise OperationCancelled(token.reason)
