"""Config commands."""

from pathlib import Path

import typer

from ..config import default_config_path, write_config_template
from ..constants import EXIT_FAILED
from ..output import get_output_context

config_app = typer.Typer(help="Configuration commands")


@config_app.command("init")
def init(
    path: Path | None = typer.Option(
        None,
        "--path",
        "-p",
        help="Where to write config.toml (defaults to the per-user location)",
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config"),
) -> None:
    """Write a config.toml template."""
    ctx = get_output_context()
    config_path = path or default_config_path()

    if config_path.exists() and not force:
        ctx.error(f"Config already exists: {config_path}")
        raise typer.Exit(EXIT_FAILED)

    write_config_template(config_path)
    ctx.success(f"Created config template: {config_path}", {"path": str(config_path)})
