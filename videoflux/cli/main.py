"""
VideoFlux command line.

    videoflux device status
    videoflux videos list
    videoflux videos pull --all --dest ~/Videos
    videoflux mirror start
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from videoflux import __version__
from videoflux.config import Config, get_config
from videoflux.constants import APP_NAME, LOG_FILE_NAME
from videoflux.exceptions import VideoFluxError
from videoflux.cli.commands import dest, device, mirror, videos

console = Console()

LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _console_level(verbose: bool, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    return logging.INFO if verbose else logging.WARNING


def setup_logging(verbose: bool, debug: bool, config: Optional[Config] = None) -> None:
    """
    Send log records to the terminal, and to a log file when the config asks.

    The console handler follows -v/--debug; the file handler follows
    ``config.log_level`` so a quiet run can still leave a detailed log.
    """
    console_handler = RichHandler(console=console, rich_tracebacks=True, show_path=debug)
    console_handler.setLevel(_console_level(verbose, debug))
    handlers: list[logging.Handler] = [console_handler]

    if config is not None and config.log_to_file:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.log_dir / LOG_FILE_NAME)
        file_handler.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
        file_handler.setFormatter(logging.Formatter(LOG_FILE_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=min(handler.level for handler in handlers),
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
    )


@click.group()
@click.version_option(version=__version__, prog_name=APP_NAME)
@click.option("-v", "--verbose", is_flag=True, help="Show progress messages.")
@click.option("--debug", is_flag=True, help="Show adb/scrcpy commands and internals.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Read settings from this JSON file instead of ~/.videoflux/config.json.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool, config_path: Optional[str]) -> None:
    """
    VideoFlux - Copy videos off an Android phone.

    Pull camera videos from a device connected over adb, delete them
    from the device, and mirror its screen with scrcpy.
    """
    config = Config.load(Path(config_path)) if config_path else get_config()
    setup_logging(verbose, debug, config)

    ctx.ensure_object(dict)
    ctx.obj.update(verbose=verbose, debug=debug, console=console, config=config)


for group in (device.device, videos.videos, mirror.mirror, dest.dest):
    cli.add_command(group)


@cli.command("status")
@click.pass_context
def status_alias(ctx: click.Context) -> None:
    """Same as 'device status'."""
    ctx.invoke(device.status_cmd)


@cli.command("list")
@click.pass_context
def list_alias(ctx: click.Context) -> None:
    """Same as 'videos list'."""
    ctx.invoke(videos.list_cmd)


def main() -> None:
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except VideoFluxError as e:
        console.print(f"[red]Error:[/red] {e}")
        if "--debug" in sys.argv:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
