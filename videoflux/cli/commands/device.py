"""
Device status commands.

This module provides commands for checking which Android device is
connected over adb.
"""

from __future__ import annotations

import json
import time

import click
from rich.console import Console
from rich.panel import Panel

from videoflux.core import DeviceSession, DeviceState, DeviceStatus

STATUS_STYLES = {
    DeviceState.CONNECTED: "green",
    DeviceState.UNAUTHORIZED: "yellow",
    DeviceState.NO_DEVICE: "dim",
    DeviceState.BRIDGE_NOT_INSTALLED: "red",
    DeviceState.ERROR: "red",
}


def get_console(ctx: click.Context) -> Console:
    """Get console from context or create new one."""
    if ctx.obj and "console" in ctx.obj:
        return ctx.obj["console"]
    return Console()


def get_session(ctx: click.Context) -> DeviceSession:
    """Build a session from the loaded configuration."""
    return DeviceSession.from_config(ctx.obj["config"])


def format_status(status: DeviceStatus) -> str:
    style = STATUS_STYLES.get(status.state, "white")
    return f"[{style}]{status.describe()}[/{style}]"


@click.group()
def device() -> None:
    """
    Check the connected Android device.

    Examples:

        $ videoflux device status
        $ videoflux device watch
    """
    pass


@device.command("status")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status_cmd(ctx: click.Context, as_json: bool = False) -> None:
    """
    Show the current device status.

    Examples:

        $ videoflux device status
        $ videoflux device status --json
    """
    console = get_console(ctx)
    session = get_session(ctx)

    status = session.get_device_status()

    if as_json:
        click.echo(json.dumps(status.to_dict(), indent=2))
        return

    console.print(Panel(format_status(status), title="Device", border_style="blue"))

    if status.state == DeviceState.BRIDGE_NOT_INSTALLED:
        console.print("[dim]Install Android platform-tools and make sure adb is on PATH.[/dim]")
        raise SystemExit(1)
    if status.state == DeviceState.ERROR:
        raise SystemExit(1)


@device.command("watch")
@click.pass_context
def watch_cmd(ctx: click.Context) -> None:
    """
    Print device status changes until Ctrl-C.

    Only changes are printed; repeated identical polls are silent.
    """
    console = get_console(ctx)
    session = get_session(ctx)

    def on_change(status: DeviceStatus) -> None:
        stamp = time.strftime("%H:%M:%S")
        console.print(f"[dim]{stamp}[/dim] {format_status(status)}")

    session.on_device_status_changed(on_change)
    console.print("[dim]Watching for device changes (Ctrl-C to stop)...[/dim]")

    session.open()
    try:
        while True:
            time.sleep(0.5)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped watching[/dim]")
    finally:
        session.close()
