"""voxlock CLI: one voice at a time, across every process on the host."""

from pathlib import Path

import typer

from voxlock import __version__

from .commands import config_app, run, say, status, unlock
from .config import load_config
from .constants import EXIT_CONFIG_ERROR
from .coordinator import Coordinator, set_coordinator
from .errors import ConfigError
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"voxlock {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="voxlock",
    help="Sequential execution coordinator for text-to-speech",
    no_args_is_help=True,
)

app.add_typer(config_app, name="config")


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config.toml",
    ),
) -> None:
    """voxlock - speak one request at a time, cancellably."""
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
    )
    ctx = OutputContext(console=console, json_mode=json_output)
    set_output_context(ctx)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        ctx.error(str(e))
        raise typer.Exit(EXIT_CONFIG_ERROR) from None
    set_coordinator(Coordinator(config))


app.command()(run)
app.command()(say)
app.command()(status)
app.command()(unlock)
