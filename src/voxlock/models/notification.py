"""JSON-RPC cancellation notification models."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

CANCELLED_METHOD = "notifications/cancelled"


class CancelledParams(BaseModel):
    """Params of a notifications/cancelled message.

    Attributes:
        request_id: ID of the request to cancel (string or integer on the wire).
        reason: Optional human-readable reason.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_id: str | int = Field(alias="requestId")
    reason: str | None = None


class CancelledNotification(BaseModel):
    """A notifications/cancelled JSON-RPC notification."""

    model_config = ConfigDict(extra="ignore")

    jsonrpc: str = "2.0"
    method: Literal["notifications/cancelled"] = CANCELLED_METHOD
    params: CancelledParams

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CancelledNotification":
        """Validate a decoded JSON-RPC payload."""
        return cls.model_validate(payload)
