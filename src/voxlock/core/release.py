"""Release callables returned by lock acquisition."""

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

Release = Callable[[], None]


def noop_release() -> None:
    """Release for a lock that was never taken."""


def release_once(release: Release, name: str) -> Release:
    """Wrap release so only the first call has an effect.

    Later calls are logged at debug level and ignored, so cleanup paths
    that run twice can't release a lock someone else now holds.
    """
    guard = threading.Lock()
    released = False

    def _release() -> None:
        nonlocal released
        with guard:
            if released:
                logger.debug(f"{name} already released")
                return
            released = True
        release()

    return _release
