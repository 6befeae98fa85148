"""
VideoFlux core library modules.

This package contains the engine: device status polling, the screen
mirror lifecycle, and listing, transferring and deleting videos.
"""

from videoflux.core.device import DeviceMonitor, DeviceState, DeviceStatus
from videoflux.core.mirror import MirrorManager, MirrorState, MirrorStatus
from videoflux.core.session import DeviceSession

__all__ = [
    "DeviceMonitor",
    "DeviceSession",
    "DeviceState",
    "DeviceStatus",
    "MirrorManager",
    "MirrorState",
    "MirrorStatus",
]
