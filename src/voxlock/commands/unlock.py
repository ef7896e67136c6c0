"""Unlock command: clear an abandoned speech lock."""

import typer

from ..constants import EXIT_FAILED
from ..coordinator import get_coordinator
from ..output import get_output_context


def unlock(
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Clear the lock even if its holder is still running",
    ),
) -> None:
    """Remove a stale speech lock."""
    ctx = get_output_context()
    lock = get_coordinator().sequential.global_lock

    if not lock.is_locked():
        ctx.success("Lock is free", {"cleared": False})
        return

    if force:
        cleared = lock.force_clear()
    elif lock.is_stale():
        cleared = lock.reclaim_stale()
    else:
        record = lock.read_record()
        holder = f"PID {record.pid}" if record else "an unknown process"
        ctx.error(f"Lock is held by {holder}; use --force to clear it anyway")
        raise typer.Exit(EXIT_FAILED)

    if not cleared:
        ctx.error("Lock changed hands while clearing; try again")
        raise typer.Exit(EXIT_FAILED)
    ctx.success("Lock cleared", {"cleared": True})
