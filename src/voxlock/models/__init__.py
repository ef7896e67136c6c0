"""Pydantic data models for voxlock.

This package defines the data structures shared across voxlock:
- Lock ownership record persisted inside the lock directory (LockRecord)
- Outcome of a guarded speech operation (SpeechResult, OutcomeStatus)
- Cancellation notifications received from clients (CancelledNotification)

Example:
    >>> from voxlock.models import LockRecord
    >>> LockRecord.for_current_process().model_dump_json()
"""

from .lock import LockRecord
from .notification import CANCELLED_METHOD, CancelledNotification, CancelledParams
from .result import OutcomeStatus, SpeechResult

__all__ = [
    "CANCELLED_METHOD",
    "CancelledNotification",
    "CancelledParams",
    "LockRecord",
    "OutcomeStatus",
    "SpeechResult",
]
