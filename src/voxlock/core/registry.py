"""Registry of cancellable in-flight operations.

Maps a correlation id to the trigger that cancels the operation. The
table is bounded, every entry expires on its own after a fixed timeout,
and every path that removes an entry also stops its timer.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from ..constants import (
    CLEANUP_TIMEOUT_SECONDS,
    MAX_CONCURRENT_REQUESTS,
    MAX_REASON_LENGTH,
    MAX_REQUEST_ID_LENGTH,
)
from ..errors import RegistryFullError

logger = logging.getLogger(__name__)

Trigger = Callable[[], object]


class Timer(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]


def _thread_timer(interval: float, function: Callable[[], None]) -> Timer:
    timer = threading.Timer(interval, function)
    timer.daemon = True
    return timer


@dataclass(eq=False)
class CancellableEntry:
    """One tracked operation. Owned by the registry."""

    request_id: str
    trigger: Trigger
    timer: Timer | None = None
    registered_at: float = field(default_factory=time.monotonic)

    def stop_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()


class CancellationRegistry:
    """Bounded table of cancellable operations.

    Args:
        max_requests: Maximum number of live entries
        cleanup_timeout: Seconds after which an entry is dropped without cancelling
        max_id_length: Correlation ids are truncated to this length
        max_reason_length: Cancellation reasons are truncated to this length
        timer_factory: Builds the expiry timer for an entry
    """

    def __init__(
        self,
        max_requests: int = MAX_CONCURRENT_REQUESTS,
        cleanup_timeout: float = CLEANUP_TIMEOUT_SECONDS,
        max_id_length: int = MAX_REQUEST_ID_LENGTH,
        max_reason_length: int = MAX_REASON_LENGTH,
        timer_factory: TimerFactory = _thread_timer,
    ) -> None:
        self.max_requests = max_requests
        self.cleanup_timeout = cleanup_timeout
        self.max_id_length = max_id_length
        self.max_reason_length = max_reason_length
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._entries: dict[str, CancellableEntry] = {}

    def _normalize(self, request_id: str) -> str:
        if len(request_id) > self.max_id_length:
            logger.warning(f"Request ID too long ({len(request_id)} chars), truncating")
            return request_id[: self.max_id_length]
        return request_id

    def register(self, request_id: str, trigger: Trigger) -> None:
        """Track an operation so it can be cancelled by id.

        An existing entry under the same id is replaced; its timer is
        stopped first and its trigger is never invoked.

        Args:
            request_id: Correlation id of the operation
            trigger: Called with no arguments to cancel the operation

        Raises:
            RegistryFullError: If the registry already holds max_requests entries
        """
        request_id = self._normalize(request_id)

        with self._lock:
            previous = self._entries.get(request_id)
            if previous is None and len(self._entries) >= self.max_requests:
                logger.warning(
                    f"Maximum concurrent requests reached ({len(self._entries)}/"
                    f"{self.max_requests}), rejecting {request_id}"
                )
                raise RegistryFullError(
                    f"Too many concurrent requests (max {self.max_requests})"
                )

            if previous is not None:
                previous.stop_timer()
                logger.debug(f"Replaced existing registration for {request_id}")

            entry = CancellableEntry(request_id=request_id, trigger=trigger)
            timer = self._timer_factory(self.cleanup_timeout, lambda: self._expire(entry))
            entry.timer = timer
            self._entries[request_id] = entry
            timer.start()

        logger.debug(f"Registered cancellable request {request_id}")

    def cancel(self, request_id: str, reason: str = "") -> bool:
        """Cancel an operation by id.

        Returns:
            True if an operation was found and its trigger invoked, False
            if the id is unknown or already completed
        """
        if not request_id:
            logger.warning("Empty request ID provided for cancellation")
            return False
        request_id = self._normalize(request_id)
        reason = reason[: self.max_reason_length]

        with self._lock:
            entry = self._remove_locked(request_id)

        if entry is None:
            logger.debug(f"Cancellation requested for unknown request {request_id} ({reason})")
            return False

        logger.info(f"Cancelling request {request_id}: {reason or 'no reason given'}")
        try:
            entry.trigger()
        except Exception:
            logger.exception(f"Cancellation trigger for {request_id} failed")
        return True

    def complete(self, request_id: str) -> None:
        """Stop tracking an operation that finished normally."""
        request_id = self._normalize(request_id)
        with self._lock:
            self._remove_locked(request_id)

    def active_count(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, request_id: object) -> bool:
        if not isinstance(request_id, str):
            return False
        with self._lock:
            return self._normalize(request_id) in self._entries

    def shutdown(self) -> None:
        """Stop every timer and fire every trigger, then clear the table."""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
            for entry in entries:
                entry.stop_timer()

        for entry in entries:
            try:
                entry.trigger()
            except Exception:
                logger.exception(f"Cancellation trigger for {entry.request_id} failed")
        logger.info(f"Cancellation registry shut down, {len(entries)} requests cancelled")

    def _expire(self, entry: CancellableEntry) -> None:
        with self._lock:
            # A replaced entry's timer may fire late; never drop its successor
            if self._entries.get(entry.request_id) is not entry:
                return
            self._remove_locked(entry.request_id)
        logger.debug(f"Request {entry.request_id} expired after {self.cleanup_timeout}s")

    def _remove_locked(self, request_id: str) -> CancellableEntry | None:
        entry = self._entries.pop(request_id, None)
        if entry is not None:
            entry.stop_timer()
            logger.debug(f"Cleaned up request tracking for {request_id}")
        return entry
