"""Glue between client cancellation requests and the registry.

Clients identify an in-flight request by id; these helpers derive safe
ids for registration and route notifications/cancelled messages to
CancellationRegistry.cancel().
"""

import logging
import re
import time
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from ..constants import MAX_REASON_LENGTH, MAX_SANITIZED_ID_LENGTH, MAX_TOOL_NAME_LENGTH
from ..models import CANCELLED_METHOD, CancelledNotification
from .registry import CancellationRegistry

logger = logging.getLogger(__name__)

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_UNSAFE_TOOL_CHARS = re.compile(r"[^A-Za-z0-9_]")


def _strip_id(value: str) -> str:
    return _UNSAFE_ID_CHARS.sub("", value[:MAX_SANITIZED_ID_LENGTH])


def sanitize_request_id(request_id: str) -> str:
    """Make a client-supplied request id safe for logging and storage."""
    return _strip_id(request_id) or f"safe-{time.time_ns()}"


def sanitize_notification_request_id(request_id: str) -> str:
    """Sanitize an id from a cancellation notification.

    Unlike sanitize_request_id() there is no generated fallback: an id
    that sanitizes to nothing can't match any registered request.
    """
    return _strip_id(request_id) or "invalid"


def sanitize_tool_name(name: str) -> str:
    return _UNSAFE_TOOL_CHARS.sub("", name[:MAX_TOOL_NAME_LENGTH]) or "unknown"


def extract_request_id(
    tool_name: str,
    request_id: str | int | None = None,
    meta: Mapping[str, Any] | None = None,
) -> str:
    """Pick the id a request is tracked under.

    Prefers an explicit request id, then the request's progress token,
    then a generated "<tool>-<nanoseconds>" id.

    Args:
        tool_name: Name of the tool being invoked
        request_id: JSON-RPC request id, if the transport exposes it
        meta: Request _meta mapping (may carry progressToken)

    Returns:
        Sanitized request id
    """
    if isinstance(request_id, str):
        return sanitize_request_id(request_id)
    if isinstance(request_id, int) and not isinstance(request_id, bool):
        return str(request_id)

    if meta:
        token = meta.get("progressToken")
        if isinstance(token, str):
            return sanitize_request_id(token)

    return f"{sanitize_tool_name(tool_name)}-{time.time_ns()}"


def cancel_request(registry: CancellationRegistry, request_id: str, reason: str = "") -> bool:
    """Cancel a tracked request by id.

    Returns:
        True if the request was found and cancelled
    """
    return registry.cancel(request_id, reason)


def handle_cancellation_notification(
    registry: CancellationRegistry, payload: Mapping[str, Any]
) -> bool:
    """Process an incoming JSON-RPC notification.

    Non-cancellation methods and malformed payloads are logged and ignored.

    Args:
        registry: Registry holding the in-flight requests
        payload: Decoded notification ({"method": ..., "params": {...}})

    Returns:
        True if a request was cancelled
    """
    method = payload.get("method")
    logger.debug(f"Received notification {method}")
    if method != CANCELLED_METHOD:
        return False

    try:
        notification = CancelledNotification.from_payload(dict(payload))
    except ValidationError as e:
        logger.warning(f"Ignoring malformed cancellation notification: {e}")
        return False

    request_id = sanitize_notification_request_id(str(notification.params.request_id))
    reason = (notification.params.reason or "")[:MAX_REASON_LENGTH]

    logger.info(f"Processing cancellation notification for {request_id}")
    cancelled = registry.cancel(request_id, reason)
    if cancelled:
        logger.info(f"Successfully cancelled request {request_id}")
    else:
        logger.debug(f"Request {request_id} not found or already completed")
    return cancelled
