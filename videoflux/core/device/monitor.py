"""
Device status polling.

This module queries adb for the attached device and runs a background
loop that announces status changes to subscribers, suppressing repeats.

Example:
    monitor = DeviceMonitor(CommandChannel("adb"))
    monitor.on_status_changed(lambda status: print(status.describe()))
    monitor.start()
    ...
    monitor.stop()
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from videoflux.constants import (
    ADB_STATE_DEVICE,
    ADB_STATE_UNAUTHORIZED,
    DEVICE_POLL_INTERVAL,
    UNKNOWN_DEVICE_NAME,
)
from videoflux.core.bridge.channel import CommandChannel
from videoflux.core.device.status import DeviceStatus
from videoflux.exceptions import BridgeError, ToolNotInstalledError

logger = logging.getLogger(__name__)

StatusCallback = Callable[[DeviceStatus], None]

# First line of `adb devices` output
DEVICES_HEADER = "List of devices attached"


class DeviceMonitor:
    """
    Tracks connectivity of the first attached device.

    The monitor keeps one "last known" status. The background loop only
    notifies subscribers when a poll produces a status that differs from
    it, so consumers never see the same status twice in a row.
    """

    def __init__(
        self,
        channel: CommandChannel,
        poll_interval: float = DEVICE_POLL_INTERVAL,
    ):
        """
        Initialize the monitor.

        Args:
            channel: Command channel bound to adb.
            poll_interval: Seconds between background polls.
        """
        self._channel = channel
        self._poll_interval = poll_interval

        self._last_status: Optional[DeviceStatus] = None
        self._callbacks: list[StatusCallback] = []
        self._lock = threading.RLock()

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

        logger.debug(f"DeviceMonitor initialized (interval={poll_interval}s)")

    @property
    def last_status(self) -> Optional[DeviceStatus]:
        """Most recently recorded status, or None before the first query."""
        with self._lock:
            return self._last_status

    @property
    def is_running(self) -> bool:
        """Whether the background loop is active."""
        return self._thread is not None and self._thread.is_alive()

    def on_status_changed(self, callback: StatusCallback) -> Callable[[], None]:
        """
        Register a callback for status changes.

        Args:
            callback: Function receiving the new DeviceStatus.

        Returns:
            Function that removes the callback again.
        """
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def query_status(self) -> DeviceStatus:
        """
        Work out the current device status.

        Never raises: transport failures become an error status.

        Returns:
            DeviceStatus for the first device adb reports.
        """
        if not self._channel.is_tool_available():
            return DeviceStatus.bridge_not_installed()

        try:
            result = self._channel.run(["devices"])
        except ToolNotInstalledError:
            return DeviceStatus.bridge_not_installed()
        except BridgeError as e:
            logger.debug(f"Device listing failed: {e}")
            return DeviceStatus.error(str(e))

        if not result.ok:
            message = result.stderr.strip() or f"adb devices exited with code {result.exit_code}"
            return DeviceStatus.error(message)

        device_lines = [
            line
            for line in result.stdout.strip().splitlines()
            if line.strip()
            and not line.startswith("*")
            and not line.startswith(DEVICES_HEADER)
        ]
        if not device_lines:
            return DeviceStatus.no_device()

        parts = device_lines[0].split("\t")
        if len(parts) < 2:
            return DeviceStatus.no_device()

        device_id = parts[0].strip()
        device_state = parts[1].strip()

        if device_state == ADB_STATE_UNAUTHORIZED:
            return DeviceStatus.unauthorized(device_id)

        if device_state == ADB_STATE_DEVICE:
            return DeviceStatus.connected(device_id, self._get_device_name(device_id))

        # offline, recovery, sideload...
        return DeviceStatus.no_device()

    def get_status(self) -> DeviceStatus:
        """
        Query the status on demand and record it as last known.

        Subscribers are not notified; the caller already has the value.
        """
        status = self.query_status()
        with self._lock:
            self._last_status = status
        return status

    def poll_once(self) -> Optional[DeviceStatus]:
        """
        Query the status and notify subscribers if it changed.

        Returns:
            The status that was announced, or None if nothing changed.
        """
        status = self.query_status()

        with self._lock:
            if status == self._last_status:
                return None
            self._last_status = status
            callbacks = list(self._callbacks)

        logger.info(f"Device status changed: {status.describe()}")
        for callback in callbacks:
            try:
                callback(status)
            except Exception as e:
                logger.warning(f"Error in status callback: {e}")

        return status

    def start(self) -> None:
        """Start the background polling loop. No-op if already running."""
        with self._lock:
            if self.is_running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run,
                name="device-monitor",
                daemon=True,
            )
            self._thread.start()
        logger.debug("Device polling started")

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the background polling loop. No-op if not running."""
        with self._lock:
            thread = self._thread
            self._thread = None
            if thread is None:
                return
            self._stop_event.set()

        if thread is not threading.current_thread():
            thread.join(timeout=timeout)
        logger.debug("Device polling stopped")

    def _run(self) -> None:
        while not self._stop_event.wait(self._poll_interval):
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"Device poll failed: {e}")

    def _get_device_name(self, device_id: str) -> str:
        """Read the device model, falling back to a placeholder."""
        try:
            result = self._channel.run(
                ["-s", device_id, "shell", "getprop", "ro.product.model"]
            )
        except BridgeError as e:
            logger.debug(f"Could not read model of {device_id}: {e}")
            return UNKNOWN_DEVICE_NAME

        if not result.ok:
            return UNKNOWN_DEVICE_NAME
        return result.stdout.strip() or UNKNOWN_DEVICE_NAME

    def __enter__(self) -> DeviceMonitor:
        """Context manager entry - start polling."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - stop polling."""
        self.stop()
