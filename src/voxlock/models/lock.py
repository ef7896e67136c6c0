"""Lock record model for cross-process speech coordination.

The lock directory itself is the lock; this record is an advisory
side-channel written after the directory is created, used only to
decide whether a held lock has been abandoned.
"""

import os
import socket
from datetime import datetime

from pydantic import BaseModel, Field


def _hostname() -> str:
    try:
        return socket.gethostname()
    except OSError:
        return ""


class LockRecord(BaseModel):
    """Lock ownership record written to <lock dir>/content.json.

    Attributes:
        pid: Process ID of the lock holder.
        start_time: When the lock was acquired.
        hostname: Host the holder runs on (pids are host-scoped).
    """

    pid: int = Field(description="Process ID holding the lock")
    start_time: datetime = Field(default_factory=datetime.now)
    hostname: str = Field(default_factory=_hostname, description="Host of the lock holder")

    @classmethod
    def for_current_process(cls) -> "LockRecord":
        """Build a record describing this process."""
        return cls(pid=os.getpid())

    def is_local(self) -> bool:
        """Return True if the record was written on this host."""
        return self.hostname == _hostname()

    def is_owned_by_current_process(self) -> bool:
        """Return True if this process on this host wrote the record."""
        return self.pid == os.getpid() and self.is_local()
