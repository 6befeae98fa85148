"""
Destination size-limit checks ahead of a transfer.

On a filesystem with a per-file ceiling (FAT32), files that can't fit are
split off before anything is pulled. The caller is told which files would
be skipped and either confirms (the rest are transferred) or cancels (the
whole batch is dropped).

Example:
    prescreen = LargeFilePrescreen(orchestrator, browser)
    result = prescreen.prescreen(files, "/Volumes/SDCARD", FilesystemType.FAT32)
    if result.needs_warning:
        show(result.warning)
        prescreen.confirm_pending()
    else:
        orchestrator.start(result.files, "/Volumes/SDCARD")
"""

from __future__ import annotations

import logging
import posixpath
from typing import Sequence

from videoflux.core.transfer.browser import DeviceBrowser
from videoflux.core.transfer.models import (
    FilesystemType,
    LargeFile,
    LargeFileWarning,
    PrescreenResult,
)
from videoflux.core.transfer.orchestrator import TransferOrchestrator

logger = logging.getLogger(__name__)


class LargeFilePrescreen:
    """Gates batches against the destination's maximum file size."""

    def __init__(self, orchestrator: TransferOrchestrator, browser: DeviceBrowser):
        self._orchestrator = orchestrator
        self._browser = browser

    def prescreen(
        self,
        files: Sequence[str],
        dest_path: str,
        filesystem_type: FilesystemType,
    ) -> PrescreenResult:
        """
        Split a batch into files that fit and files that don't.

        When some files are too large, the ones that fit are kept as the
        pending set for confirm_pending() and no transfer is started.

        Args:
            files: Remote paths requested for transfer.
            dest_path: Local destination folder.
            filesystem_type: Filesystem of the destination.

        Returns:
            PrescreenResult; `files` holds the batch to run now when no
            warning is needed.
        """
        files = list(files)
        limit = filesystem_type.max_file_size
        if limit is None:
            return PrescreenResult(needs_warning=False, files=files)

        self._orchestrator.report_checking(len(files))

        within_limit: list[str] = []
        over_limit: list[LargeFile] = []
        for remote_path in files:
            size = self._browser.file_size(remote_path)
            if size > limit:
                over_limit.append(LargeFile(
                    path=remote_path,
                    filename=posixpath.basename(remote_path),
                    size=size,
                ))
            else:
                within_limit.append(remote_path)

        if not over_limit:
            return PrescreenResult(needs_warning=False, files=files)

        logger.info(
            f"{len(over_limit)} file(s) exceed the {filesystem_type.value} limit "
            f"of {limit} bytes"
        )
        self._orchestrator.set_pending(within_limit, dest_path, filesystem_type)
        self._orchestrator.report_idle()

        return PrescreenResult(
            needs_warning=True,
            files=within_limit,
            warning=LargeFileWarning(files=over_limit, filesystem_type=filesystem_type),
        )

    def confirm_pending(self, wait: bool = False) -> bool:
        """
        Transfer the files retained by the last warning.

        The pending set is cleared whether or not the transfer starts.

        Returns:
            False if nothing was pending or a batch is already running.
        """
        files, dest_path = self._orchestrator.take_pending()
        if not files or dest_path is None:
            logger.debug("Nothing pending to confirm")
            return False
        return self._orchestrator.start(files, dest_path, wait=wait)

    def cancel_pending(self) -> None:
        """Drop the pending set without transferring anything."""
        self._orchestrator.clear_pending()
