"""
Destination folder commands.

The destination is where pulled videos land. Its filesystem decides
whether large files need a warning before transfer.
"""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel

from videoflux.core import DeviceSession
from videoflux.core.transfer import DestinationInfo, format_size


def get_console(ctx: click.Context) -> Console:
    """Get console from context or create new one."""
    if ctx.obj and "console" in ctx.obj:
        return ctx.obj["console"]
    return Console()


def get_session(ctx: click.Context) -> DeviceSession:
    """Build a session from the loaded configuration."""
    return DeviceSession.from_config(ctx.obj["config"])


def describe_destination(info: DestinationInfo) -> str:
    limit = info.filesystem.max_file_size
    limit_text = f"{format_size(limit)} per file" if limit else "none"
    return (
        f"[bold]Path:[/bold] {info.path}\n"
        f"[bold]Filesystem:[/bold] {info.filesystem.type.value}\n"
        f"[bold]Volume:[/bold] {info.filesystem.volume_name}\n"
        f"[bold]Size limit:[/bold] {limit_text}"
    )


@click.group()
def dest() -> None:
    """
    Choose where pulled videos are saved.

    Examples:

        $ videoflux dest set /Volumes/SDCARD/Videos
        $ videoflux dest show
    """
    pass


@dest.command("set")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.pass_context
def set_cmd(ctx: click.Context, path: str) -> None:
    """
    Set the destination folder.

    PATH must be an existing directory.
    """
    console = get_console(ctx)
    session = get_session(ctx)

    info = session.select_destination(lambda: str(Path(path).resolve()))
    if info is None:
        console.print("[red]Error:[/red] No destination selected")
        raise SystemExit(1)

    console.print(Panel(describe_destination(info), title="Destination", border_style="green"))


@dest.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show_cmd(ctx: click.Context, as_json: bool) -> None:
    """Show the saved destination folder."""
    console = get_console(ctx)
    session = get_session(ctx)

    info = session.get_destination()

    if as_json:
        click.echo(json.dumps(info.to_dict() if info else None, indent=2))
        return

    if info is None:
        console.print("[dim]No destination set. Use 'videoflux dest set PATH'.[/dim]")
        return

    console.print(Panel(describe_destination(info), title="Destination", border_style="blue"))
