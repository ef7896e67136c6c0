"""Constants for voxlock."""

# Global lock
LOCK_DIR_NAME = "voxlock-global.lock.d"
LOCK_CONTENT_FILE = "content.json"
STALE_GRACE_SECONDS = 300  # 5 minutes between mkdir and record write
RETRY_MIN_MS = 25
RETRY_MAX_MS = 75

# Cancellation registry
MAX_CONCURRENT_REQUESTS = 1000
CLEANUP_TIMEOUT_SECONDS = 30 * 60  # 30 minutes
MAX_REQUEST_ID_LENGTH = 256
MAX_REASON_LENGTH = 500

# Request id sanitizing
MAX_SANITIZED_ID_LENGTH = 128
MAX_TOOL_NAME_LENGTH = 64

# Speech subprocesses (seconds)
GRACEFUL_SHUTDOWN_TIMEOUT = 5.0

# CLI exit codes
EXIT_FAILED = 1
EXIT_LOCK_ERROR = 3
EXIT_CONFIG_ERROR = 3
EXIT_CANCELLED = 130
