"""
Constants used throughout the VideoFlux package.

This module contains all magic numbers, default values, and constant
strings used by various components. Import from here rather than
hardcoding values elsewhere.
"""

from pathlib import Path

# Version info
VERSION = "0.1.0"
APP_NAME = "VideoFlux"

# Default paths
DEFAULT_CONFIG_DIR = Path.home() / ".videoflux"
DEFAULT_LOG_DIR = DEFAULT_CONFIG_DIR / "logs"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"
DEFAULT_SETTINGS_FILE = DEFAULT_CONFIG_DIR / "settings.json"
LOG_FILE_NAME = "videoflux.log"

# External tools
BRIDGE_EXECUTABLE = "adb"
MIRROR_EXECUTABLE = "scrcpy"

# Bridge settings
DEFAULT_COMMAND_TIMEOUT = 30  # seconds
REMOTE_VIDEO_DIR = "/sdcard/DCIM/Camera"
VIDEO_EXTENSIONS = (".mp4", ".mov", ".mkv", ".3gp", ".webm", ".avi", ".m4v")

# adb device states (second column of `adb devices`)
ADB_STATE_DEVICE = "device"
ADB_STATE_UNAUTHORIZED = "unauthorized"

# Fallback when the device model can't be read
UNKNOWN_DEVICE_NAME = "Unknown Device"

# Polling intervals
DEVICE_POLL_INTERVAL = 2.0  # seconds
PROGRESS_POLL_INTERVAL = 0.5  # seconds

# Largest single file a FAT32 volume can hold (2^32 - 1 bytes)
FAT32_MAX_FILE_SIZE = 4294967295

# macOS volume naming
MACOS_VOLUMES_ROOT = "/Volumes/"
MACOS_ROOT_VOLUME_NAME = "Macintosh HD"
