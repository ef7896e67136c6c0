"""CLI command implementations for voxlock."""

from .config import config_app
from .run import run, say
from .status import status
from .unlock import unlock

__all__ = [
    "config_app",
    "run",
    "say",
    "status",
    "unlock",
]
