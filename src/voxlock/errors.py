"""Error types raised by voxlock."""


class VoxlockError(Exception):
    """Base exception for voxlock errors."""


class LockError(VoxlockError):
    """Lock directory could not be created or inspected."""


class OperationCancelled(VoxlockError):
    """Operation was aborted by its cancellation token."""

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason
        super().__init__(f"Operation cancelled: {reason}" if reason else "Operation cancelled")


class RegistryFullError(VoxlockError):
    """Cancellation registry is at capacity."""


class SpeechError(VoxlockError):
    """Guarded speech operation failed."""


class ConfigError(VoxlockError):
    """Configuration could not be loaded."""
