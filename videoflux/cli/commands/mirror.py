"""
Screen mirroring commands.

This module provides commands for showing the device screen on the
computer with scrcpy.
"""

from __future__ import annotations

import json
import threading

import click
from rich.console import Console

from videoflux.core import DeviceSession, MirrorState, MirrorStatus


def get_console(ctx: click.Context) -> Console:
    """Get console from context or create new one."""
    if ctx.obj and "console" in ctx.obj:
        return ctx.obj["console"]
    return Console()


def get_session(ctx: click.Context) -> DeviceSession:
    """Build a session from the loaded configuration."""
    return DeviceSession.from_config(ctx.obj["config"])


@click.group()
def mirror() -> None:
    """
    Mirror the device screen.

    Examples:

        $ videoflux mirror start
        $ videoflux mirror check
    """
    pass


@mirror.command("start")
@click.pass_context
def start_cmd(ctx: click.Context) -> None:
    """
    Start mirroring and wait until the window closes.

    Press Ctrl-C to stop the mirror from the terminal.
    """
    console = get_console(ctx)
    session = get_session(ctx)

    stopped = threading.Event()

    def on_change(status: MirrorStatus) -> None:
        if status.state in (MirrorState.INACTIVE, MirrorState.ERROR):
            stopped.set()

    session.on_mirror_status_changed(on_change)
    status = session.start_mirror()

    if status.state == MirrorState.TOOL_NOT_INSTALLED:
        console.print("[red]Error:[/red] scrcpy is not installed")
        console.print("[dim]Install it from https://github.com/Genymobile/scrcpy[/dim]")
        raise SystemExit(1)
    if status.state == MirrorState.ERROR:
        console.print(f"[red]Error:[/red] Failed to start mirror: {status.message}")
        raise SystemExit(1)

    console.print("[green]✓[/green] Mirror started (Ctrl-C to stop)")

    try:
        while not stopped.wait(0.5):
            pass
        console.print("[dim]Mirror window closed[/dim]")
    except KeyboardInterrupt:
        console.print("\n[dim]Stopping mirror...[/dim]")
    finally:
        session.close()


@mirror.command("check")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check_cmd(ctx: click.Context, as_json: bool) -> None:
    """
    Check that scrcpy can be launched.

    A mirror belongs to the 'mirror start' process that launched it, so
    this only reports whether the tool is installed.
    """
    console = get_console(ctx)
    session = get_session(ctx)
    executable = ctx.obj["config"].mirror.executable
    available = session.mirror_tool_available

    if as_json:
        click.echo(json.dumps({"tool": executable, "available": available}, indent=2))
        return

    if available:
        console.print(f"[green]✓[/green] {executable} is installed")
    else:
        console.print(f"[red]{executable} is not installed[/red]")
        console.print("[dim]Install it from https://github.com/Genymobile/scrcpy[/dim]")
        raise SystemExit(1)
