"""
Remote video browser for Android devices.

This module lists the videos in the device's camera folder, reads
authoritative file sizes and deletes single files, all through adb
shell commands.
"""

from __future__ import annotations

import logging
import posixpath
import shlex
from datetime import datetime
from typing import Optional, Sequence

from videoflux.constants import REMOTE_VIDEO_DIR, VIDEO_EXTENSIONS
from videoflux.core.bridge.channel import CommandChannel
from videoflux.core.transfer.errors import describe_delete_failure
from videoflux.core.transfer.models import VideoFile
from videoflux.exceptions import BridgeError

logger = logging.getLogger(__name__)

# size|mtime|path, one line per file
STAT_FORMAT = "%s|%Y|%n"


class DeviceBrowser:
    """
    Browse and manage videos on the attached device.

    Example:
        browser = DeviceBrowser(CommandChannel("adb"))

        for video in browser.list_videos():
            print(f"{video.filename}: {video.size_human}")

        size = browser.file_size("/sdcard/DCIM/Camera/VID_0001.mp4")
    """

    def __init__(
        self,
        channel: CommandChannel,
        video_dir: str = REMOTE_VIDEO_DIR,
        extensions: Sequence[str] = VIDEO_EXTENSIONS,
    ):
        """
        Initialize device browser.

        Args:
            channel: Command channel bound to adb.
            video_dir: Device directory holding the videos.
            extensions: File extensions treated as videos.
        """
        self._channel = channel
        self._video_dir = video_dir.rstrip("/") or "/"
        self._extensions = tuple(ext.lower() for ext in extensions)

    @property
    def video_dir(self) -> str:
        return self._video_dir

    def list_videos(self) -> list[VideoFile]:
        """
        List videos in the camera folder, newest first.

        A missing or empty folder gives an empty list.

        Returns:
            VideoFile for every video in the folder.

        Raises:
            BridgeError: If adb could not be run.
        """
        command = f"stat -c {shlex.quote(STAT_FORMAT)} {shlex.quote(self._video_dir)}/*"
        result = self._channel.run(["shell", command])

        # With no match the glob stays literal and stat fails; whatever
        # lines did parse are still good
        videos: list[VideoFile] = []
        for line in result.stdout.splitlines():
            video = self._parse_stat_line(line)
            if video is not None and self._is_video(video.filename):
                videos.append(video)

        if not result.ok and not videos:
            logger.debug(f"No videos listed in {self._video_dir}: {result.output.strip()}")

        videos.sort(key=lambda v: v.modified_at, reverse=True)
        return videos

    def file_size(self, path: str) -> int:
        """
        Get the size of a file on the device.

        Args:
            path: Absolute path on the device.

        Returns:
            Size in bytes, or 0 if it can't be determined.
        """
        try:
            result = self._channel.run(["shell", f"stat -c %s {shlex.quote(path)}"])
        except BridgeError as e:
            logger.warning(f"Size query failed for {path}: {e}")
            return 0

        if not result.ok:
            logger.debug(f"stat failed for {path}: {result.output.strip()}")
            return 0

        try:
            return int(result.stdout.strip())
        except ValueError:
            logger.debug(f"Unexpected stat output for {path}: {result.stdout!r}")
            return 0

    def delete_file(self, path: str) -> tuple[bool, Optional[str]]:
        """
        Delete one file on the device.

        Never raises.

        Args:
            path: Absolute path on the device.

        Returns:
            (True, None) on success, (False, reason) on failure.
        """
        try:
            result = self._channel.run(["shell", f"rm {shlex.quote(path)}"])
        except BridgeError as e:
            logger.warning(f"Delete failed for {path}: {e}")
            return False, describe_delete_failure(str(e))

        # adb shell often reports errors on stdout with a zero exit code
        output = result.output.strip()
        if result.ok and not output:
            logger.debug(f"Deleted {path}")
            return True, None

        return False, describe_delete_failure(output)

    def _is_video(self, filename: str) -> bool:
        return filename.lower().endswith(self._extensions)

    def _parse_stat_line(self, line: str) -> Optional[VideoFile]:
        """Parse one `size|mtime|path` line, or None if malformed."""
        parts = line.strip().split("|", 2)
        if len(parts) != 3:
            return None

        size_text, mtime_text, path = parts
        try:
            size = int(size_text)
            modified_at = datetime.fromtimestamp(int(mtime_text))
        except (ValueError, OverflowError, OSError):
            return None

        if size < 0 or not path:
            return None

        return VideoFile(
            path=path,
            filename=posixpath.basename(path),
            size=size,
            modified_at=modified_at,
        )
