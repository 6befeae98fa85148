"""
Data models for video transfers.

These are plain value objects shared by the transfer components, the
session facade and the CLI.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from videoflux.constants import FAT32_MAX_FILE_SIZE


def format_size(size: float) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if abs(size) < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} PB"


class FilesystemType(Enum):
    """Destination filesystem families the engine knows about."""

    FAT32 = "FAT32"
    EXFAT = "exFAT"
    APFS = "APFS"
    HFS_PLUS = "HFS+"
    NTFS = "NTFS"
    UNKNOWN = "Unknown"

    @property
    def max_file_size(self) -> Optional[int]:
        """Largest file this filesystem can store, or None if unbounded."""
        if self is FilesystemType.FAT32:
            return FAT32_MAX_FILE_SIZE
        return None

    @classmethod
    def parse(cls, value: Optional[str]) -> FilesystemType:
        """Look up a type by value, case-insensitively. Unknown on no match."""
        if value:
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return cls.UNKNOWN


@dataclass
class FilesystemInfo:
    """Classification of the volume a destination folder lives on."""

    type: FilesystemType = FilesystemType.UNKNOWN
    volume_name: str = "Unknown"

    @property
    def max_file_size(self) -> Optional[int]:
        return self.type.max_file_size

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "type": self.type.value,
            "volume_name": self.volume_name,
            "max_file_size": self.max_file_size,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FilesystemInfo:
        """Create from dictionary."""
        return cls(
            type=FilesystemType.parse(data.get("type")),
            volume_name=data.get("volume_name", "Unknown"),
        )


@dataclass
class DestinationInfo:
    """A local destination folder and its filesystem."""

    path: str
    filesystem: FilesystemInfo = field(default_factory=FilesystemInfo)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "path": self.path,
            "filesystem": self.filesystem.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DestinationInfo:
        """Create from dictionary."""
        return cls(
            path=data.get("path", ""),
            filesystem=FilesystemInfo.from_dict(data.get("filesystem") or {}),
        )


@dataclass
class VideoFile:
    """
    A video on the device.

    Attributes:
        path: Absolute path on the device
        filename: Base name
        size: Size in bytes
        modified_at: Last modification time
    """

    path: str
    filename: str
    size: int
    modified_at: datetime

    @property
    def size_human(self) -> str:
        """Get human-readable size string."""
        return format_size(self.size)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "path": self.path,
            "filename": self.filename,
            "size": self.size,
            "size_human": self.size_human,
            "modified_at": self.modified_at.isoformat(),
        }


@dataclass
class FailedFile:
    """A file that could not be transferred or deleted, and why."""

    path: str
    error: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "error": self.error}


class TransferStatus(Enum):
    """Phase reported by a TransferProgress event."""

    IDLE = "idle"
    CHECKING = "checking"
    TRANSFERRING = "transferring"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (TransferStatus.COMPLETE, TransferStatus.CANCELLED, TransferStatus.ERROR)


@dataclass
class TransferProgress:
    """
    One event in the transfer progress stream.

    Only the fields relevant to `status` are filled in.
    """

    status: TransferStatus
    current_file: Optional[str] = None
    current_file_index: Optional[int] = None
    total_files: Optional[int] = None
    file_progress: Optional[int] = None
    completed_files: list[str] = field(default_factory=list)
    failed_files: list[FailedFile] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def overall_progress(self) -> int:
        """Whole-batch completion percentage for transferring events."""
        if not self.total_files:
            return 0
        index = self.current_file_index or 0
        fraction = (self.file_progress or 0) / 100
        return math.floor((index + fraction) / self.total_files * 100)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, omitting unset fields."""
        data: dict[str, Any] = {"status": self.status.value}
        for key in ("current_file", "current_file_index", "total_files", "file_progress", "error_message"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.status in (TransferStatus.COMPLETE, TransferStatus.CANCELLED):
            data["completed_files"] = list(self.completed_files)
            data["failed_files"] = [f.to_dict() for f in self.failed_files]
        return data


@dataclass
class LargeFile:
    """A file too big for the destination filesystem."""

    path: str
    filename: str
    size: int

    @property
    def size_human(self) -> str:
        return format_size(self.size)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "filename": self.filename,
            "size": self.size,
            "size_human": self.size_human,
        }


@dataclass
class LargeFileWarning:
    """Files that would be skipped if the user proceeds."""

    files: list[LargeFile]
    filesystem_type: FilesystemType

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": [f.to_dict() for f in self.files],
            "filesystem_type": self.filesystem_type.value,
        }


@dataclass
class PrescreenResult:
    """Outcome of checking a batch against the destination's limits."""

    needs_warning: bool
    files: list[str] = field(default_factory=list)
    warning: Optional[LargeFileWarning] = None


@dataclass
class TransferStartResult:
    """What happened when a transfer was requested."""

    needs_warning: bool
    large_files: Optional[LargeFileWarning] = None
    started: Optional[bool] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"needs_warning": self.needs_warning}
        if self.large_files is not None:
            data["large_files"] = self.large_files.to_dict()
        if self.started is not None:
            data["started"] = self.started
        return data


@dataclass
class DeleteResult:
    """Aggregate outcome of a batch delete."""

    deleted: list[str] = field(default_factory=list)
    failed: list[FailedFile] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "deleted": list(self.deleted),
            "failed": [f.to_dict() for f in self.failed],
        }
