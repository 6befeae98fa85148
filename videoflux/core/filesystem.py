"""
Destination filesystem classification.

Works out which filesystem a local folder lives on so the transfer
prescreen knows whether a per-file size ceiling applies. On macOS this
asks diskutil about the volume; on Linux it reads /proc/mounts. Anything
that can't be determined is reported as Unknown rather than raised.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Optional, Union

from videoflux.constants import MACOS_ROOT_VOLUME_NAME, MACOS_VOLUMES_ROOT
from videoflux.core.transfer.models import FilesystemInfo, FilesystemType

logger = logging.getLogger(__name__)

PROC_MOUNTS = Path("/proc/mounts")

# Linux mount types -> filesystem family
LINUX_FS_TYPES = {
    "vfat": FilesystemType.FAT32,
    "msdos": FilesystemType.FAT32,
    "exfat": FilesystemType.EXFAT,
    "ntfs": FilesystemType.NTFS,
    "ntfs3": FilesystemType.NTFS,
    "hfsplus": FilesystemType.HFS_PLUS,
    "apfs": FilesystemType.APFS,
}


def get_volume_from_path(path: str) -> str:
    """macOS volume mount point holding `path`."""
    if path.startswith(MACOS_VOLUMES_ROOT):
        parts = path.split("/")
        if len(parts) >= 3 and parts[2]:
            return f"{MACOS_VOLUMES_ROOT}{parts[2]}"
    return "/"


def parse_diskutil_personality(output: str) -> FilesystemType:
    """Map the "File System Personality" line of `diskutil info` to a type."""
    for line in output.splitlines():
        if "File System Personality:" not in line:
            continue
        personality = line.split(":", 1)[1].strip().lower()
        if "fat32" in personality:
            return FilesystemType.FAT32
        if "exfat" in personality:
            return FilesystemType.EXFAT
        if "apfs" in personality:
            return FilesystemType.APFS
        if "hfs" in personality:
            return FilesystemType.HFS_PLUS
        if "ntfs" in personality:
            return FilesystemType.NTFS
        break
    return FilesystemType.UNKNOWN


def find_mount(path: str, mounts_text: str) -> Optional[tuple[str, str]]:
    """
    Find the mount holding `path` in /proc/mounts content.

    Returns:
        (mount_point, fs_type) of the longest matching mount point, or None.
    """
    best: Optional[tuple[str, str]] = None
    for line in mounts_text.splitlines():
        fields = line.split()
        if len(fields) < 3:
            continue
        # /proc/mounts escapes spaces as \040
        mount_point = fields[1].replace("\\040", " ")
        fs_type = fields[2]

        prefix = mount_point.rstrip("/") + "/"
        if path == mount_point or path.startswith(prefix):
            if best is None or len(mount_point) > len(best[0]):
                best = (mount_point, fs_type)
    return best


def classify_filesystem(path: Union[str, Path]) -> FilesystemInfo:
    """
    Classify the filesystem of a local folder.

    Args:
        path: Local folder.

    Returns:
        FilesystemInfo; type is UNKNOWN when detection fails.
    """
    path = os.path.abspath(str(path))
    if sys.platform == "darwin":
        return _classify_macos(path)
    if PROC_MOUNTS.exists():
        return _classify_linux(path)
    return FilesystemInfo(FilesystemType.UNKNOWN, Path(path).anchor or "Unknown")


def _classify_macos(path: str) -> FilesystemInfo:
    volume = get_volume_from_path(path)
    volume_name = MACOS_ROOT_VOLUME_NAME if volume == "/" else volume.rsplit("/", 1)[-1]

    try:
        result = subprocess.run(
            ["diskutil", "info", volume],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning(f"diskutil failed for {volume}: {e}")
        return FilesystemInfo(FilesystemType.UNKNOWN, volume_name)

    if result.returncode != 0:
        return FilesystemInfo(FilesystemType.UNKNOWN, volume_name)

    return FilesystemInfo(parse_diskutil_personality(result.stdout), volume_name)


def _classify_linux(path: str) -> FilesystemInfo:
    try:
        mounts_text = PROC_MOUNTS.read_text()
    except OSError as e:
        logger.warning(f"Could not read {PROC_MOUNTS}: {e}")
        return FilesystemInfo(FilesystemType.UNKNOWN, "Unknown")

    mount = find_mount(path, mounts_text)
    if mount is None:
        return FilesystemInfo(FilesystemType.UNKNOWN, "Unknown")

    mount_point, fs_type = mount
    volume_name = Path(mount_point).name or "/"
    return FilesystemInfo(
        LINUX_FS_TYPES.get(fs_type.lower(), FilesystemType.UNKNOWN),
        volume_name,
    )
