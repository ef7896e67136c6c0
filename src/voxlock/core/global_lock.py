"""Cross-process speech lock.

Provides directory-based locking so that only one process on the host
plays audio at a time. Includes stale lock detection for crash recovery.

Uses atomic directory creation (mkdir) as the compare-and-swap for
acquisition and atomic rename as the compare-and-swap for reclaiming a
lock whose holder has died.
"""

import asyncio
import logging
import os
import random
import shutil
import sys
import tempfile
import time
from collections.abc import Callable
from pathlib import Path

from ..constants import (
    LOCK_CONTENT_FILE,
    LOCK_DIR_NAME,
    RETRY_MAX_MS,
    RETRY_MIN_MS,
    STALE_GRACE_SECONDS,
)
from ..errors import LockError
from ..models import LockRecord
from .cancellation import CancellationToken, race
from .liveness import probe_process
from .release import Release, noop_release, release_once

logger = logging.getLogger(__name__)

Probe = Callable[[int], bool | None]

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def default_lock_dir() -> Path:
    """Well-known lock directory shared by every process on the host."""
    if sys.platform == "win32":
        return Path(tempfile.gettempdir()) / LOCK_DIR_NAME
    return Path("/tmp") / LOCK_DIR_NAME


def _base36(value: int) -> str:
    digits = []
    while True:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
        if value == 0:
            return "".join(reversed(digits))


class GlobalLock:
    """Filesystem lock usable by unrelated processes on one host.

    The lock directory's existence is the lock state. The record inside it
    is advisory and only feeds the staleness decision.

    Args:
        lock_dir: Directory whose existence means "locked"
        enabled: When False, acquire() returns a no-op release immediately
        stale_grace_seconds: Age after which a lock without a usable record is stale
        retry_min_ms: Lower bound of the randomized retry delay
        retry_max_ms: Upper bound of the randomized retry delay
        probe: Liveness probe returning True/False/None (unknown)
    """

    def __init__(
        self,
        lock_dir: Path | None = None,
        *,
        enabled: bool = True,
        stale_grace_seconds: float = STALE_GRACE_SECONDS,
        retry_min_ms: int = RETRY_MIN_MS,
        retry_max_ms: int = RETRY_MAX_MS,
        probe: Probe = probe_process,
    ) -> None:
        self.lock_dir = lock_dir or default_lock_dir()
        self.enabled = enabled
        self.stale_grace_seconds = stale_grace_seconds
        self.retry_min_ms = retry_min_ms
        self.retry_max_ms = max(retry_min_ms, retry_max_ms)
        self._probe = probe

    @property
    def content_file(self) -> Path:
        return self.lock_dir / LOCK_CONTENT_FILE

    def probe(self, pid: int) -> bool | None:
        return self._probe(pid)

    async def acquire(self, token: CancellationToken) -> Release:
        """Acquire the lock, waiting for the current holder if needed.

        Args:
            token: Cancellation token; firing it aborts the wait

        Returns:
            Release callable that must be invoked exactly once

        Raises:
            OperationCancelled: If token fired before the lock was obtained
            LockError: If the lock directory can't be created for reasons
                other than already existing
        """
        if not self.enabled:
            logger.debug("Sequential execution disabled, skipping global lock")
            return noop_release

        token.raise_if_cancelled()
        pid = os.getpid()
        logger.debug(f"Acquiring global lock {self.lock_dir} (pid {pid})")

        while True:
            if self.try_acquire():
                logger.debug(f"Global lock acquired {self.lock_dir} (pid {pid})")
                return release_once(self.release, "Global lock")

            if self.is_stale() and self.reclaim_stale():
                # Path is free now, no need to back off
                continue

            delay = random.uniform(self.retry_min_ms, self.retry_max_ms) / 1000
            await race(asyncio.sleep(delay), token)

    def try_acquire(self) -> bool:
        """Make one attempt to create the lock directory.

        Returns:
            True if the lock was won, False if it is already held

        Raises:
            LockError: If the directory can't be created (permissions, disk full)
        """
        try:
            self.lock_dir.mkdir(mode=0o755)
        except FileExistsError:
            return False
        except OSError as e:
            raise LockError(f"Failed to create lock directory {self.lock_dir}: {e}") from e

        self._write_record()
        return True

    def _write_record(self) -> None:
        record = LockRecord.for_current_process()
        try:
            self.content_file.write_text(record.model_dump_json())
        except OSError as e:
            # Lock is still ours; staleness checks fall back to directory age
            logger.warning(f"Could not write lock record {self.content_file}: {e}")

    def read_record(self) -> LockRecord | None:
        """Read the holder's record.

        Returns:
            LockRecord if present and parseable, None otherwise
        """
        try:
            return LockRecord.model_validate_json(self.content_file.read_bytes())
        except Exception:
            # Missing or corrupted record
            return None

    def is_locked(self) -> bool:
        return self.lock_dir.is_dir()

    def is_stale(self) -> bool:
        """Check if the existing lock was abandoned.

        A record naming a dead local process is stale at any age. A record
        naming a live process is never stale. Without a usable record the
        directory must be older than the grace period.
        """
        record = self.read_record()
        if record is not None and record.is_local():
            alive = self.probe(record.pid)
            if alive is False:
                logger.debug(f"Lock holder PID {record.pid} is not running")
                return True
            if alive is True:
                return False

        try:
            mtime = self.lock_dir.stat().st_mtime
        except OSError as e:
            # Can't inspect it at all: favor progress over deadlock
            logger.debug(f"Cannot inspect lock directory {self.lock_dir}: {e}")
            return True

        age = time.time() - mtime
        return age > self.stale_grace_seconds

    def reclaim_stale(self) -> bool:
        """Claim a stale lock by renaming it aside, then delete it.

        Returns:
            True if this process removed the stale lock, False if another
            process got there first
        """
        stale_dir = self.lock_dir.with_name(
            f"{self.lock_dir.name}.stale.{os.getpid()}.{_base36(time.time_ns())}"
        )
        try:
            os.rename(self.lock_dir, stale_dir)
        except OSError as e:
            logger.debug(f"Failed to claim stale lock {self.lock_dir}: {e}")
            return False

        logger.info(f"Reclaimed stale lock {self.lock_dir}")
        self._remove_tree(stale_dir)
        return True

    def force_clear(self) -> bool:
        """Remove the lock regardless of who holds it.

        Returns:
            True if a lock directory was removed
        """
        if not self.is_locked():
            return False
        logger.warning(f"Force-clearing lock {self.lock_dir}")
        return self.reclaim_stale()

    def release(self) -> None:
        """Remove the record, then the lock directory. Never raises."""
        record = self.read_record()
        if record is not None and not record.is_owned_by_current_process():
            logger.warning(
                f"Not releasing {self.lock_dir}: held by PID {record.pid} on {record.hostname}"
            )
            return

        try:
            self.content_file.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove lock record {self.content_file}: {e}")
        try:
            self.lock_dir.rmdir()
        except OSError as e:
            # Stale detection on the next acquire cleans this up
            logger.warning(f"Failed to remove lock directory {self.lock_dir}: {e}")
        else:
            logger.debug(f"Global lock released {self.lock_dir}")

    @staticmethod
    def _remove_tree(path: Path) -> None:
        try:
            shutil.rmtree(path)
        except OSError as e:
            logger.warning(f"Failed to delete reclaimed lock {path}: {e}")
