"""
Device status module for VideoFlux.

Example:
    from videoflux.core.device import DeviceMonitor

    monitor = DeviceMonitor(channel)
    print(monitor.get_status().describe())
"""

from videoflux.core.device.monitor import DeviceMonitor
from videoflux.core.device.status import DeviceState, DeviceStatus

__all__ = [
    "DeviceMonitor",
    "DeviceState",
    "DeviceStatus",
]
