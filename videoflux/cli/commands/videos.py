"""
CLI commands for device videos.

This module provides commands for listing camera videos on the device,
pulling them to the destination folder and deleting them from the device.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn

from videoflux.core import DeviceSession
from videoflux.core.transfer import (
    DeleteResult,
    DestinationInfo,
    LargeFileWarning,
    TransferProgress,
    TransferStatus,
)

logger = logging.getLogger(__name__)


def get_console(ctx: click.Context) -> Console:
    """Get console from context or create new one."""
    if ctx.obj and "console" in ctx.obj:
        return ctx.obj["console"]
    return Console()


def get_session(ctx: click.Context) -> DeviceSession:
    """Build a session from the loaded configuration."""
    return DeviceSession.from_config(ctx.obj["config"])


@click.group()
def videos() -> None:
    """
    List, pull and delete videos on the device.

    Videos are read from the camera folder (/sdcard/DCIM/Camera unless
    configured otherwise).

    Examples:

        List videos:
        $ videoflux videos list

        Pull everything to the saved destination:
        $ videoflux videos pull --all

        Delete two videos:
        $ videoflux videos delete /sdcard/DCIM/Camera/a.mp4 /sdcard/DCIM/Camera/b.mp4
    """
    pass


@videos.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_cmd(ctx: click.Context, as_json: bool = False) -> None:
    """
    List videos on the device, newest first.

    Examples:

        $ videoflux videos list
        $ videoflux videos list --json
    """
    console = get_console(ctx)
    session = get_session(ctx)

    items = session.list_remote_videos()

    if as_json:
        click.echo(json.dumps([item.to_dict() for item in items], indent=2))
        return

    if not items:
        console.print("[dim]No videos found on the device[/dim]")
        return

    table = Table(title="Videos on device")
    table.add_column("Name", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Modified", style="dim")

    for item in items:
        table.add_row(
            item.filename,
            item.size_human,
            item.modified_at.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)
    console.print(f"\n[dim]{len(items)} videos[/dim]")


@videos.command("delete")
@click.argument("paths", nargs=-1, required=True)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def delete_cmd(ctx: click.Context, paths: tuple[str, ...], yes: bool) -> None:
    """
    Delete videos from the device.

    PATHS are full device paths as shown by 'videoflux videos list --json'.
    """
    console = get_console(ctx)
    session = get_session(ctx)

    if not yes:
        console.print(f"About to delete {len(paths)} file(s) from the device.")
        if not click.confirm("Continue?"):
            console.print("[dim]Cancelled[/dim]")
            return

    result = session.delete_remote_files(list(paths))
    _print_delete_result(console, result)

    if result.failed:
        raise SystemExit(1)


@videos.command("pull")
@click.argument("paths", nargs=-1)
@click.option("--all", "pull_all", is_flag=True, help="Pull every video on the device.")
@click.option(
    "--dest", "dest_dir",
    type=click.Path(exists=True, file_okay=False),
    help="Destination folder (saved for next time).",
)
@click.option("--yes", "-y", is_flag=True, help="Skip the large-file confirmation prompt.")
@click.pass_context
def pull_cmd(
    ctx: click.Context,
    paths: tuple[str, ...],
    pull_all: bool,
    dest_dir: Optional[str],
    yes: bool,
) -> None:
    """
    Pull videos from the device to the destination folder.

    Files that already exist locally get a numbered name instead of
    being overwritten. Ctrl-C cancels after the current file.

    Examples:

        $ videoflux videos pull --all --dest ~/Videos
        $ videoflux videos pull /sdcard/DCIM/Camera/VID_0001.mp4
    """
    console = get_console(ctx)
    session = get_session(ctx)

    if pull_all and paths:
        raise click.UsageError("Give either PATHS or --all, not both.")

    destination = _resolve_destination(session, dest_dir)
    if destination is None:
        console.print("[red]Error:[/red] No destination folder set")
        console.print("[dim]Use --dest DIR or 'videoflux dest set DIR'.[/dim]")
        raise SystemExit(1)

    files = list(paths)
    if pull_all:
        files = [video.path for video in session.list_remote_videos()]

    if not files:
        console.print("[dim]No videos to transfer[/dim]")
        return

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    )
    task = progress.add_task("Preparing...", total=100)
    finished: list[TransferProgress] = []

    def on_progress(p: TransferProgress) -> None:
        if p.status == TransferStatus.CHECKING:
            progress.update(task, description="[dim]Checking file sizes...[/dim]")
        elif p.status == TransferStatus.TRANSFERRING:
            progress.update(
                task,
                completed=p.overall_progress,
                description=f"[cyan]{p.current_file}[/cyan] ({(p.current_file_index or 0) + 1}/{p.total_files})",
            )
        elif p.status.is_terminal:
            finished.append(p)

    session.on_transfer_progress(on_progress)

    result = session.start_transfer(files, destination.path, destination.filesystem.type)

    if result.needs_warning:
        _print_large_file_warning(console, result.large_files)
        if not yes and not click.confirm("Transfer the remaining files?"):
            session.cancel_transfer()
            console.print("[dim]Cancelled[/dim]")
            return
        if not session.confirm_transfer():
            console.print("[dim]No files left to transfer[/dim]")
            return
    elif not result.started:
        console.print("[red]Error:[/red] A transfer is already running")
        raise SystemExit(1)

    with progress:
        try:
            while not session.wait_for_transfer(timeout=0.2):
                pass
        except KeyboardInterrupt:
            console.print("[yellow]Cancelling after the current file...[/yellow]")
            session.cancel_transfer()
            while not session.wait_for_transfer(timeout=0.2):
                pass

    if not finished:
        return

    _print_transfer_summary(console, finished[-1], destination)

    final = finished[-1]
    if final.status == TransferStatus.ERROR or final.failed_files:
        raise SystemExit(1)


def _resolve_destination(session: DeviceSession, dest_dir: Optional[str]) -> Optional[DestinationInfo]:
    if dest_dir:
        return session.select_destination(lambda: str(Path(dest_dir).resolve()))
    return session.get_destination()


def _print_large_file_warning(console: Console, warning: Optional[LargeFileWarning]) -> None:
    if warning is None:
        return

    table = Table(title=f"Too large for {warning.filesystem_type.value}")
    table.add_column("Name", style="yellow")
    table.add_column("Size", justify="right")

    for item in warning.files:
        table.add_row(item.filename, item.size_human)

    console.print(table)
    console.print("[yellow]⚠[/yellow] These files will be skipped.")


def _print_transfer_summary(console: Console, final: TransferProgress, destination: DestinationInfo) -> None:
    if final.status == TransferStatus.ERROR:
        console.print(f"[red]Error:[/red] Transfer failed: {final.error_message}")
        return

    if final.status == TransferStatus.CANCELLED:
        console.print("[yellow]Transfer cancelled[/yellow]")

    console.print(
        f"\n[green]✓[/green] Transferred {len(final.completed_files)} files to {destination.path}"
    )

    if final.failed_files:
        table = Table(title="Failed")
        table.add_column("File", style="red")
        table.add_column("Reason")
        for failed in final.failed_files:
            table.add_row(Path(failed.path).name, failed.error)
        console.print(table)


def _print_delete_result(console: Console, result: DeleteResult) -> None:
    if result.deleted:
        console.print(f"[green]✓[/green] Deleted {len(result.deleted)} files")

    if result.failed:
        table = Table(title="Not deleted")
        table.add_column("File", style="red")
        table.add_column("Reason")
        for failed in result.failed:
            table.add_row(failed.path, failed.error)
        console.print(table)
