"""voxlock: one voice at a time, across every process on the host."""

__version__ = "0.1.0"
