"""Outcome of a guarded speech operation."""

from enum import Enum

from pydantic import BaseModel


class OutcomeStatus(str, Enum):
    """How a guarded operation ended."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class SpeechResult(BaseModel):
    """User-visible result of one speak request.

    Cancellation is its own status so callers can tell "stopped on
    request" apart from both success and failure.
    """

    request_id: str
    status: OutcomeStatus
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.COMPLETED

    @classmethod
    def completed(cls, request_id: str, message: str = "") -> "SpeechResult":
        return cls(request_id=request_id, status=OutcomeStatus.COMPLETED, message=message)

    @classmethod
    def cancelled(cls, request_id: str, reason: str | None = None) -> "SpeechResult":
        message = f"Cancelled: {reason}" if reason else "Cancelled"
        return cls(request_id=request_id, status=OutcomeStatus.CANCELLED, message=message)

    @classmethod
    def failed(cls, request_id: str, message: str) -> "SpeechResult":
        return cls(request_id=request_id, status=OutcomeStatus.FAILED, message=message)
