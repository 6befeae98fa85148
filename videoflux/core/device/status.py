"""
Device connectivity status values.

A DeviceStatus is immutable and compares by state plus every field, so
two connected statuses are equal only when both the device id and the
device name match. The monitor relies on this equality to decide whether
a freshly polled status is worth announcing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class DeviceState(Enum):
    """Which kind of status is being reported."""

    CONNECTED = "connected"
    UNAUTHORIZED = "unauthorized"
    NO_DEVICE = "no-device"
    BRIDGE_NOT_INSTALLED = "adb-not-installed"
    ERROR = "error"


@dataclass(frozen=True)
class DeviceStatus:
    """
    Current device connectivity.

    Use the classmethod constructors rather than building instances by
    hand; they leave the fields that don't belong to a state unset.

    Attributes:
        state: Kind of status
        device_id: adb serial (connected and unauthorized only)
        device_name: Device model name (connected only)
        message: Failure description (error only)
    """

    state: DeviceState
    device_id: Optional[str] = None
    device_name: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def connected(cls, device_id: str, device_name: str) -> DeviceStatus:
        return cls(DeviceState.CONNECTED, device_id=device_id, device_name=device_name)

    @classmethod
    def unauthorized(cls, device_id: str) -> DeviceStatus:
        return cls(DeviceState.UNAUTHORIZED, device_id=device_id)

    @classmethod
    def no_device(cls) -> DeviceStatus:
        return cls(DeviceState.NO_DEVICE)

    @classmethod
    def bridge_not_installed(cls) -> DeviceStatus:
        return cls(DeviceState.BRIDGE_NOT_INSTALLED)

    @classmethod
    def error(cls, message: str) -> DeviceStatus:
        return cls(DeviceState.ERROR, message=message)

    @property
    def is_connected(self) -> bool:
        """Whether a usable device is attached."""
        return self.state == DeviceState.CONNECTED

    def describe(self) -> str:
        """One-line human readable description."""
        if self.state == DeviceState.CONNECTED:
            return f"Connected: {self.device_name} ({self.device_id})"
        if self.state == DeviceState.UNAUTHORIZED:
            return f"Unauthorized: accept the USB debugging prompt on {self.device_id}"
        if self.state == DeviceState.NO_DEVICE:
            return "No device connected"
        if self.state == DeviceState.BRIDGE_NOT_INSTALLED:
            return "adb is not installed"
        return f"Error: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, keeping only the fields of this state."""
        data: dict[str, Any] = {"status": self.state.value}
        if self.state == DeviceState.CONNECTED:
            data["device_id"] = self.device_id
            data["device_name"] = self.device_name
        elif self.state == DeviceState.UNAUTHORIZED:
            data["device_id"] = self.device_id
        elif self.state == DeviceState.ERROR:
            data["message"] = self.message
        return data
