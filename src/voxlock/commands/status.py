"""Status command: who holds the speech lock."""

from ..coordinator import get_coordinator
from ..core import GlobalLock
from ..output import get_output_context


def lock_status(lock: GlobalLock) -> dict:
    """Describe the lock for display or JSON output."""
    info: dict = {"lock_dir": str(lock.lock_dir), "locked": lock.is_locked()}
    if not info["locked"]:
        return info

    record = lock.read_record()
    if record is not None:
        info.update(
            pid=record.pid,
            hostname=record.hostname,
            start_time=record.start_time.isoformat(),
            alive=lock.probe(record.pid) if record.is_local() else None,
        )
    info["stale"] = lock.is_stale()
    return info


def status() -> None:
    """Show whether the speech lock is held and by whom."""
    ctx = get_output_context()
    coordinator = get_coordinator()
    lock = coordinator.sequential.global_lock

    info = lock_status(lock)
    if ctx.json_mode:
        ctx.print_json({**info, "sequential": lock.enabled})
        return

    if not lock.enabled:
        ctx.print("[yellow]Sequential execution is disabled[/yellow]")
    ctx.print(f"[bold]Lock:[/bold] {info['lock_dir']}")
    if not info["locked"]:
        ctx.print("[green]Status: free[/green]")
        return

    if "pid" in info:
        ctx.print(f"[bold]Holder:[/bold] PID {info['pid']} on {info['hostname']}")
        ctx.print(f"[bold]Since:[/bold] {info['start_time']}")
    else:
        ctx.print("[bold]Holder:[/bold] unknown (record missing or unreadable)")

    if info["stale"]:
        ctx.print("[yellow]Status: stale (run 'voxlock unlock' to clear)[/yellow]")
    else:
        ctx.print("[cyan]Status: held[/cyan]")
