"""
Video transfer module for VideoFlux.

This module provides listing, pulling and deleting of videos on the
device, plus the size-limit prescreen and collision-free naming used
for pulled files.

Example:
    from videoflux.core.transfer import DeviceBrowser, TransferOrchestrator

    browser = DeviceBrowser(channel)
    for video in browser.list_videos():
        print(f"{video.filename} - {video.size_human}")

    videos = browser.list_videos()
    orchestrator = TransferOrchestrator(channel, browser)
    orchestrator.start([v.path for v in videos], "./videos", wait=True)
"""

from videoflux.core.transfer.browser import DeviceBrowser
from videoflux.core.transfer.delete import BatchDeleter
from videoflux.core.transfer.errors import FailureKind, classify_failure
from videoflux.core.transfer.models import (
    DeleteResult,
    DestinationInfo,
    FailedFile,
    FilesystemInfo,
    FilesystemType,
    LargeFile,
    LargeFileWarning,
    PrescreenResult,
    TransferProgress,
    TransferStartResult,
    TransferStatus,
    VideoFile,
    format_size,
)
from videoflux.core.transfer.orchestrator import TransferBatchState, TransferOrchestrator
from videoflux.core.transfer.paths import unique_destination
from videoflux.core.transfer.prescreen import LargeFilePrescreen

__all__ = [
    "BatchDeleter",
    "DeleteResult",
    "DestinationInfo",
    "DeviceBrowser",
    "FailedFile",
    "FailureKind",
    "FilesystemInfo",
    "FilesystemType",
    "LargeFile",
    "LargeFilePrescreen",
    "LargeFileWarning",
    "PrescreenResult",
    "TransferBatchState",
    "TransferOrchestrator",
    "TransferProgress",
    "TransferStartResult",
    "TransferStatus",
    "VideoFile",
    "classify_failure",
    "format_size",
    "unique_destination",
]
