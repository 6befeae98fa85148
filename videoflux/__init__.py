"""
VideoFlux - Copy videos off an Android phone.

This package pulls videos from a device connected over adb into a local
folder, browses and deletes them on the device, and can mirror the
device screen with scrcpy.
"""

from videoflux.constants import VERSION

__version__ = VERSION
__author__ = "VideoFlux Contributors"

from videoflux.core import (
    DeviceMonitor,
    DeviceSession,
    DeviceStatus,
    MirrorManager,
    MirrorStatus,
)

__all__ = [
    "DeviceMonitor",
    "DeviceSession",
    "DeviceStatus",
    "MirrorManager",
    "MirrorStatus",
    "__version__",
]
