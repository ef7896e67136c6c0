"""Core coordination primitives for voxlock.

This package provides:
- Process liveness probing (liveness)
- Cooperative cancellation tokens (cancellation)
- Cross-process directory lock with crash recovery (global_lock)
- In-process fast-path lock (local_lock)
- Composed sequential lock (sequential)
- Bounded registry of cancellable operations (registry)
- Request id helpers and cancellation notifications (cancellable)
"""

from .cancellable import (
    cancel_request,
    extract_request_id,
    handle_cancellation_notification,
    sanitize_notification_request_id,
    sanitize_request_id,
    sanitize_tool_name,
)
from .cancellation import CancellationToken, linked_token, race
from .global_lock import GlobalLock, default_lock_dir
from .liveness import is_process_alive, probe_process
from .local_lock import LocalLock
from .registry import CancellableEntry, CancellationRegistry
from .release import Release, noop_release, release_once
from .sequential import SequentialLock

__all__ = [
    "CancellableEntry",
    "CancellationRegistry",
    "CancellationToken",
    "GlobalLock",
    "LocalLock",
    "Release",
    "SequentialLock",
    "cancel_request",
    "default_lock_dir",
    "extract_request_id",
    "handle_cancellation_notification",
    "is_process_alive",
    "linked_token",
    "noop_release",
    "probe_process",
    "race",
    "release_once",
    "sanitize_notification_request_id",
    "sanitize_request_id",
    "sanitize_tool_name",
]
