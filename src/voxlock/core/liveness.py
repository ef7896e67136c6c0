"""Process liveness checks.

Answers "does a process with this PID exist on this host?" without
ever raising. POSIX hosts probe with signal 0; Windows opens the process
with the minimum query right.
"""

import logging
import os
import sys

logger = logging.getLogger(__name__)

# Windows constants
_PROCESS_QUERY_LIMITED_INFORMATION = 0x1000
_STILL_ACTIVE = 259
_ERROR_ACCESS_DENIED = 5
_ERROR_INVALID_PARAMETER = 87


def _probe_posix(pid: int) -> bool | None:
    try:
        os.kill(pid, 0)  # Signal 0 doesn't kill, just checks
        return True
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists, but belongs to someone we can't signal
        return True
    except OSError as e:
        logger.debug(f"Liveness probe for PID {pid} failed: {e}")
        return None


def _probe_windows(pid: int) -> bool | None:
    import ctypes
    from ctypes import wintypes

    kernel32 = ctypes.WinDLL("kernel32", use_last_error=True)  # type: ignore[attr-defined]
    kernel32.OpenProcess.restype = wintypes.HANDLE

    handle = kernel32.OpenProcess(_PROCESS_QUERY_LIMITED_INFORMATION, False, pid)
    if not handle:
        error = ctypes.get_last_error()  # type: ignore[attr-defined]
        if error == _ERROR_ACCESS_DENIED:
            return True
        if error == _ERROR_INVALID_PARAMETER:
            return False
        logger.debug(f"OpenProcess({pid}) failed with error {error}")
        return None

    try:
        exit_code = wintypes.DWORD()
        if not kernel32.GetExitCodeProcess(handle, ctypes.byref(exit_code)):
            return True  # Handle opened, so the process object exists
        return exit_code.value == _STILL_ACTIVE
    finally:
        kernel32.CloseHandle(handle)


def probe_process(pid: int) -> bool | None:
    """Probe whether a process exists.

    Args:
        pid: Process ID to probe

    Returns:
        True if the process exists (even if we may not signal it),
        False if the PID clearly does not belong to a running process,
        None if liveness could not be determined
    """
    if pid <= 0:
        return False
    try:
        if sys.platform == "win32":
            return _probe_windows(pid)
        return _probe_posix(pid)
    except (OverflowError, ValueError):
        # PID outside the platform's range can't be running
        return False
    except Exception as e:
        logger.debug(f"Liveness probe for PID {pid} raised {e!r}")
        return None


def is_process_alive(pid: int) -> bool:
    """Check if a process with given PID is running.

    Undeterminable liveness is reported as False; callers that need to
    tell "dead" apart from "unknown" use probe_process().
    """
    return probe_process(pid) is True
