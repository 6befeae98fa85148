"""
Batch transfer of videos from the device.

The orchestrator pulls a list of remote files into a local folder one
file at a time, reporting progress as a stream of TransferProgress
events. Only one batch runs at a time; cancellation takes effect at the
next file boundary.

Example:
    orchestrator = TransferOrchestrator(channel, DeviceBrowser(channel))
    orchestrator.on_progress(lambda p: print(p.status.value, p.file_progress))

    if orchestrator.start(["/sdcard/DCIM/Camera/VID_0001.mp4"], "/Volumes/SD"):
        orchestrator.join()
"""

from __future__ import annotations

import logging
import math
import posixpath
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence

from videoflux.constants import PROGRESS_POLL_INTERVAL
from videoflux.core.bridge.channel import CommandChannel
from videoflux.core.transfer.browser import DeviceBrowser
from videoflux.core.transfer.errors import describe_transfer_failure
from videoflux.core.transfer.models import (
    FailedFile,
    FilesystemType,
    TransferProgress,
    TransferStatus,
)
from videoflux.core.transfer.paths import unique_destination
from videoflux.exceptions import BridgeError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[TransferProgress], None]

SIZE_UNKNOWN_ERROR = "Could not determine file size on device"


@dataclass
class TransferBatchState:
    """State of the current (or most recent) batch."""

    is_transferring: bool = False
    cancel_requested: bool = False
    files: list[str] = field(default_factory=list)
    pending_files: list[str] = field(default_factory=list)
    dest_path: Optional[str] = None
    filesystem_type: Optional[FilesystemType] = None


class TransferOrchestrator:
    """
    Runs pull batches sequentially with progress and cancellation.

    Every batch ends with exactly one terminal event (complete, cancelled
    or error), and the active flag is cleared before that event goes out.
    """

    def __init__(
        self,
        channel: CommandChannel,
        browser: DeviceBrowser,
        poll_interval: float = PROGRESS_POLL_INTERVAL,
    ):
        """
        Initialize the orchestrator.

        Args:
            channel: Command channel bound to adb.
            browser: Used for authoritative source sizes.
            poll_interval: Seconds between destination size checks.
        """
        self._channel = channel
        self._browser = browser
        self._poll_interval = poll_interval

        self._state = TransferBatchState()
        self._callbacks: list[ProgressCallback] = []
        self._lock = threading.RLock()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_transferring(self) -> bool:
        with self._lock:
            return self._state.is_transferring

    @property
    def pending_files(self) -> list[str]:
        with self._lock:
            return list(self._state.pending_files)

    @property
    def state(self) -> TransferBatchState:
        """Snapshot of the batch state."""
        with self._lock:
            return TransferBatchState(
                is_transferring=self._state.is_transferring,
                cancel_requested=self._state.cancel_requested,
                files=list(self._state.files),
                pending_files=list(self._state.pending_files),
                dest_path=self._state.dest_path,
                filesystem_type=self._state.filesystem_type,
            )

    def on_progress(self, callback: ProgressCallback) -> Callable[[], None]:
        """
        Register a callback for progress events.

        Returns:
            Function that removes the callback again.
        """
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Pending files awaiting confirmation
    # ------------------------------------------------------------------
    def set_pending(
        self,
        files: Sequence[str],
        dest_path: str,
        filesystem_type: Optional[FilesystemType] = None,
    ) -> None:
        with self._lock:
            self._state.pending_files = list(files)
            self._state.dest_path = dest_path
            self._state.filesystem_type = filesystem_type

    def take_pending(self) -> tuple[list[str], Optional[str]]:
        """Remove and return the pending files and their destination."""
        with self._lock:
            files = self._state.pending_files
            self._state.pending_files = []
            return files, self._state.dest_path

    def clear_pending(self) -> None:
        with self._lock:
            self._state.pending_files = []

    # ------------------------------------------------------------------
    # Batch control
    # ------------------------------------------------------------------
    def start(
        self,
        files: Sequence[str],
        dest_path: str,
        wait: bool = False,
    ) -> bool:
        """
        Start transferring a batch.

        Args:
            files: Remote paths, transferred in this order.
            dest_path: Local destination folder.
            wait: Run the batch in the calling thread instead of a
                  background thread.

        Returns:
            True if the batch started, False if another batch is active.
        """
        files = list(files)
        with self._lock:
            if self._state.is_transferring:
                logger.info("Transfer already in progress, ignoring start request")
                return False

            self._state.is_transferring = True
            self._state.cancel_requested = False
            self._state.files = files
            self._state.dest_path = dest_path

            if not wait:
                self._thread = threading.Thread(
                    target=self._run_batch,
                    args=(files, dest_path),
                    name="transfer-batch",
                    daemon=True,
                )
                self._thread.start()

        logger.info(f"Starting transfer of {len(files)} file(s) to {dest_path}")
        if wait:
            self._run_batch(files, dest_path)
        return True

    def cancel(self) -> None:
        """Request cancellation at the next file boundary and drop pending files."""
        with self._lock:
            if self._state.is_transferring and not self._state.cancel_requested:
                self._state.cancel_requested = True
                logger.info("Transfer cancellation requested")
            self._state.pending_files = []

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for a background batch to finish.

        Returns:
            True if no batch is running afterwards.
        """
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                return False
        return not self.is_transferring

    def report_checking(self, total_files: int) -> None:
        """Announce that a batch is being checked before transfer."""
        self._emit(TransferProgress(TransferStatus.CHECKING, total_files=total_files))

    def report_idle(self) -> None:
        self._emit(TransferProgress(TransferStatus.IDLE))

    # ------------------------------------------------------------------
    # Batch execution
    # ------------------------------------------------------------------
    def _run_batch(self, files: list[str], dest_path: str) -> None:
        total = len(files)
        completed: list[str] = []
        failed: list[FailedFile] = []

        try:
            for index, remote_path in enumerate(files):
                if self._cancel_requested():
                    logger.info(f"Transfer cancelled before file {index + 1} of {total}")
                    self._finish(TransferProgress(
                        TransferStatus.CANCELLED,
                        current_file_index=index,
                        total_files=total,
                        completed_files=list(completed),
                        failed_files=list(failed),
                    ))
                    return

                error = self._transfer_file(remote_path, dest_path, index, total)
                if error is None:
                    completed.append(posixpath.basename(remote_path))
                else:
                    failed.append(FailedFile(remote_path, error))

            logger.info(
                f"Transfer complete: {len(completed)} succeeded, {len(failed)} failed"
            )
            self._finish(TransferProgress(
                TransferStatus.COMPLETE,
                total_files=total,
                completed_files=list(completed),
                failed_files=list(failed),
            ))

        except Exception as e:
            logger.exception("Transfer batch aborted")
            self._finish(TransferProgress(
                TransferStatus.ERROR,
                total_files=total,
                completed_files=list(completed),
                failed_files=list(failed),
                error_message=str(e),
            ))

    def _transfer_file(
        self,
        remote_path: str,
        dest_path: str,
        index: int,
        total: int,
    ) -> Optional[str]:
        """
        Pull one file.

        Returns:
            None on success, otherwise the failure reason.
        """
        filename = posixpath.basename(remote_path)
        self._emit_file_progress(filename, index, total, 0)

        local_path = unique_destination(Path(dest_path) / filename)

        source_size = self._browser.file_size(remote_path)
        if source_size <= 0:
            logger.warning(f"Skipping {remote_path}: size unknown")
            return SIZE_UNKNOWN_ERROR

        logger.debug(f"Pulling {remote_path} -> {local_path} ({source_size} bytes)")
        try:
            # Own process group: a Ctrl-C aimed at us must not kill the pull
            process = self._channel.spawn(["pull", remote_path, str(local_path)], detached=True)
        except BridgeError as e:
            logger.warning(f"Failed to start pull of {remote_path}: {e}")
            self._remove_partial(local_path)
            return describe_transfer_failure(str(e))

        last_percent = 0
        while True:
            exit_code = process.wait(timeout=self._poll_interval)
            if exit_code is not None:
                break
            # Sizes can appear to shrink on buffered filesystems; never go back
            last_percent = max(last_percent, self._percent_done(local_path, source_size))
            self._emit_file_progress(filename, index, total, last_percent)

        if exit_code == 0:
            self._emit_file_progress(filename, index, total, 100)
            logger.info(f"Transferred {filename}")
            return None

        stderr = process.stderr_text
        logger.warning(f"Pull of {remote_path} failed ({exit_code}): {stderr.strip()}")
        self._remove_partial(local_path)
        return describe_transfer_failure(stderr)

    @staticmethod
    def _percent_done(local_path: Path, source_size: int) -> int:
        try:
            dest_size = local_path.stat().st_size
        except OSError:
            return 0
        return min(99, math.floor(dest_size / source_size * 100))

    @staticmethod
    def _remove_partial(local_path: Path) -> None:
        try:
            local_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove partial file {local_path}: {e}")

    def _cancel_requested(self) -> bool:
        with self._lock:
            return self._state.cancel_requested

    def _emit_file_progress(self, filename: str, index: int, total: int, percent: int) -> None:
        self._emit(TransferProgress(
            TransferStatus.TRANSFERRING,
            current_file=filename,
            current_file_index=index,
            total_files=total,
            file_progress=percent,
        ))

    def _finish(self, progress: TransferProgress) -> None:
        with self._lock:
            self._state.is_transferring = False
        self._emit(progress)

    def _emit(self, progress: TransferProgress) -> None:
        with self._lock:
            callbacks = list(self._callbacks)
        for callback in callbacks:
            try:
                callback(progress)
            except Exception as e:
                logger.warning(f"Error in progress callback: {e}")
