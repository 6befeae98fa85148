"""
Tests for transfer data models.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from videoflux.core.transfer.models import (
    DeleteResult,
    DestinationInfo,
    FailedFile,
    FilesystemInfo,
    FilesystemType,
    LargeFile,
    LargeFileWarning,
    TransferProgress,
    TransferStartResult,
    TransferStatus,
    VideoFile,
    format_size,
)


class TestFormatSize:
    """Tests for format_size()."""

    @pytest.mark.parametrize(
        "size, text",
        [
            (0, "0.0 B"),
            (512, "512.0 B"),
            (1536, "1.5 KB"),
            (100 * 1024 * 1024, "100.0 MB"),
            (5 * 1024 ** 3, "5.0 GB"),
        ],
    )
    def test_units(self, size: int, text: str) -> None:
        """format_size should use 1024-based units."""
        assert format_size(size) == text


class TestFilesystemType:
    """Tests for FilesystemType."""

    def test_only_fat32_has_a_limit(self) -> None:
        """Only FAT32 should have a maximum file size."""
        assert FilesystemType.FAT32.max_file_size == 4294967295
        for fs_type in FilesystemType:
            if fs_type is not FilesystemType.FAT32:
                assert fs_type.max_file_size is None

    def test_parse(self) -> None:
        """parse should accept known names and fall back to Unknown."""
        assert FilesystemType.parse("fat32") is FilesystemType.FAT32
        assert FilesystemType.parse("ExFAT") is FilesystemType.EXFAT
        assert FilesystemType.parse("hfs+") is FilesystemType.HFS_PLUS
        assert FilesystemType.parse("zfs") is FilesystemType.UNKNOWN
        assert FilesystemType.parse(None) is FilesystemType.UNKNOWN


class TestDestinationInfo:
    """Tests for DestinationInfo serialization."""

    def test_round_trip(self) -> None:
        """DestinationInfo should survive to_dict and from_dict."""
        info = DestinationInfo("/Volumes/SD", FilesystemInfo(FilesystemType.FAT32, "SD"))

        assert DestinationInfo.from_dict(info.to_dict()) == info

    def test_from_dict_tolerates_unknown_type(self) -> None:
        """An unknown filesystem name should load as Unknown."""
        info = DestinationInfo.from_dict(
            {"path": "/x", "filesystem": {"type": "zfs", "volume_name": "tank"}}
        )

        assert info.filesystem.type is FilesystemType.UNKNOWN


class TestVideoFile:
    """Tests for VideoFile."""

    def test_to_dict(self) -> None:
        """VideoFile.to_dict should carry the name and size."""
        video = VideoFile(
            path="/sdcard/DCIM/Camera/VID_1.mp4",
            filename="VID_1.mp4",
            size=2048,
            modified_at=datetime(2024, 5, 1, 12, 0, 0),
        )

        data = video.to_dict()

        assert data["filename"] == "VID_1.mp4"
        assert data["size"] == 2048
        assert video.size_human == "2.0 KB"


class TestTransferProgress:
    """Tests for TransferProgress."""

    def test_overall_progress(self) -> None:
        """overall_progress should combine file index and file progress."""
        progress = TransferProgress(
            TransferStatus.TRANSFERRING,
            current_file="b.mp4",
            current_file_index=1,
            total_files=4,
            file_progress=50,
        )

        # (1 + 0.5) / 4
        assert progress.overall_progress == 37

    def test_overall_progress_without_total(self) -> None:
        """overall_progress should be 0 for an empty batch."""
        assert TransferProgress(TransferStatus.CHECKING).overall_progress == 0

    def test_terminal_states(self) -> None:
        """Only complete, cancelled and error should be terminal."""
        assert TransferStatus.COMPLETE.is_terminal
        assert TransferStatus.CANCELLED.is_terminal
        assert TransferStatus.ERROR.is_terminal
        assert not TransferStatus.TRANSFERRING.is_terminal
        assert not TransferStatus.CHECKING.is_terminal

    def test_to_dict_complete_lists_results(self) -> None:
        """A complete event should list completed and failed files."""
        progress = TransferProgress(
            TransferStatus.COMPLETE,
            total_files=2,
            completed_files=["a.mp4"],
            failed_files=[FailedFile("/sdcard/b.mp4", "Permission denied")],
        )

        data = progress.to_dict()

        assert data["status"] == "complete"
        assert data["completed_files"] == ["a.mp4"]
        assert data["failed_files"] == [{"path": "/sdcard/b.mp4", "error": "Permission denied"}]
        assert "current_file" not in data

    def test_to_dict_transferring_omits_results(self) -> None:
        """A transferring event should leave out the result lists."""
        data = TransferProgress(TransferStatus.TRANSFERRING, current_file="a.mp4").to_dict()

        assert "completed_files" not in data


class TestResults:
    """Tests for start and delete results."""

    def test_start_result_with_warning(self) -> None:
        """TransferStartResult.to_dict should include the warning."""
        warning = LargeFileWarning(
            files=[LargeFile("/sdcard/big.mp4", "big.mp4", 5 * 1024 ** 3)],
            filesystem_type=FilesystemType.FAT32,
        )

        data = TransferStartResult(needs_warning=True, large_files=warning).to_dict()

        assert data["needs_warning"] is True
        assert data["large_files"]["filesystem_type"] == "FAT32"

    def test_delete_result_to_dict(self) -> None:
        """DeleteResult.to_dict should list deleted and failed paths."""
        result = DeleteResult(deleted=["/a"], failed=[FailedFile("/b", "File not found")])

        assert result.to_dict() == {
            "deleted": ["/a"],
            "failed": [{"path": "/b", "error": "File not found"}],
        }
