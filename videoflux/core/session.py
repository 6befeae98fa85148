"""
Session facade over the VideoFlux engine.

DeviceSession wires the command channels, device monitor, mirror manager
and transfer components together and exposes the operations a front end
needs. Every operation returns a complete result; failures from the
external tools come back as status values or empty results, not
exceptions.

Example:
    with DeviceSession.from_config(get_config()) as session:
        session.on_device_status_changed(print)
        session.on_transfer_progress(print)

        videos = session.list_remote_videos()
        result = session.start_transfer(
            [v.path for v in videos], "/Volumes/SD", FilesystemType.FAT32
        )
        if result.needs_warning:
            session.confirm_transfer()
        session.wait_for_transfer()
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Sequence, Union

from videoflux.config import Config
from videoflux.constants import (
    BRIDGE_EXECUTABLE,
    DEVICE_POLL_INTERVAL,
    MIRROR_EXECUTABLE,
    PROGRESS_POLL_INTERVAL,
    REMOTE_VIDEO_DIR,
)
from videoflux.core.bridge.channel import CommandChannel
from videoflux.core.device.monitor import DeviceMonitor
from videoflux.core.device.status import DeviceStatus
from videoflux.core.filesystem import classify_filesystem
from videoflux.core.mirror.manager import MirrorManager, MirrorStatus
from videoflux.core.transfer.browser import DeviceBrowser
from videoflux.core.transfer.delete import BatchDeleter
from videoflux.core.transfer.models import (
    DeleteResult,
    DestinationInfo,
    FilesystemInfo,
    FilesystemType,
    TransferProgress,
    TransferStartResult,
    VideoFile,
)
from videoflux.core.transfer.orchestrator import TransferOrchestrator
from videoflux.core.transfer.prescreen import LargeFilePrescreen
from videoflux.exceptions import BridgeError, SettingsError
from videoflux.settings import SettingsStore

logger = logging.getLogger(__name__)

MirrorCallback = Callable[[MirrorStatus], None]


class DeviceSession:
    """
    One application's worth of device and transfer state.

    Construct once per process. open() starts device polling; close()
    stops polling and any running mirror.
    """

    def __init__(
        self,
        adb: Optional[CommandChannel] = None,
        scrcpy: Optional[CommandChannel] = None,
        settings: Optional[SettingsStore] = None,
        remote_video_dir: str = REMOTE_VIDEO_DIR,
        poll_interval: float = DEVICE_POLL_INTERVAL,
        progress_interval: float = PROGRESS_POLL_INTERVAL,
        mirror_args: Optional[Sequence[str]] = None,
        filesystem_classifier: Callable[[str], FilesystemInfo] = classify_filesystem,
    ):
        """
        Initialize the session.

        Args:
            adb: Command channel for the bridge tool.
            scrcpy: Command channel for the mirroring tool.
            settings: Settings store for the destination.
            remote_video_dir: Device folder holding the videos.
            poll_interval: Seconds between device status polls.
            progress_interval: Seconds between transfer progress checks.
            mirror_args: Extra scrcpy arguments.
            filesystem_classifier: Classifies a destination folder.
        """
        adb = adb or CommandChannel(BRIDGE_EXECUTABLE)
        scrcpy = scrcpy or CommandChannel(MIRROR_EXECUTABLE)

        self._scrcpy = scrcpy
        self._settings = settings or SettingsStore()
        self._classify = filesystem_classifier

        self._monitor = DeviceMonitor(adb, poll_interval=poll_interval)
        self._mirror = MirrorManager(scrcpy, extra_args=mirror_args)
        self._browser = DeviceBrowser(adb, video_dir=remote_video_dir)
        self._orchestrator = TransferOrchestrator(adb, self._browser, poll_interval=progress_interval)
        self._prescreen = LargeFilePrescreen(self._orchestrator, self._browser)
        self._deleter = BatchDeleter(self._browser)

        self._mirror_callbacks: list[MirrorCallback] = []
        self._last_mirror_status = MirrorStatus.inactive()
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config: Config) -> DeviceSession:
        """Build a session from configuration."""
        return cls(
            adb=CommandChannel(config.bridge.executable, timeout=config.bridge.command_timeout),
            scrcpy=CommandChannel(config.mirror.executable),
            settings=SettingsStore(config.settings_file),
            remote_video_dir=config.bridge.remote_video_dir,
            poll_interval=config.monitor.poll_interval,
            progress_interval=config.transfer.progress_interval,
            mirror_args=config.mirror.extra_args,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def open(self) -> None:
        """Start background device polling."""
        self._monitor.start()

    def close(self) -> None:
        """Stop device polling and any running mirror."""
        self._monitor.stop()
        self.stop_mirror()

    def __enter__(self) -> DeviceSession:
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def on_device_status_changed(self, callback: Callable[[DeviceStatus], None]) -> Callable[[], None]:
        return self._monitor.on_status_changed(callback)

    def on_transfer_progress(self, callback: Callable[[TransferProgress], None]) -> Callable[[], None]:
        return self._orchestrator.on_progress(callback)

    def on_mirror_status_changed(self, callback: MirrorCallback) -> Callable[[], None]:
        with self._lock:
            self._mirror_callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._mirror_callbacks:
                    self._mirror_callbacks.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Device
    # ------------------------------------------------------------------
    def get_device_status(self) -> DeviceStatus:
        return self._monitor.get_status()

    def list_remote_videos(self) -> list[VideoFile]:
        """Videos on the device, newest first; empty if adb failed."""
        try:
            return self._browser.list_videos()
        except BridgeError as e:
            logger.error(f"Failed to list videos: {e}")
            return []

    def delete_remote_files(self, paths: Sequence[str]) -> DeleteResult:
        return self._deleter.delete(paths)

    # ------------------------------------------------------------------
    # Mirror
    # ------------------------------------------------------------------
    def start_mirror(self) -> MirrorStatus:
        status = self._mirror.start(
            on_unexpected_exit=self._handle_mirror_exit,
            on_starting=lambda: self._publish_mirror_status(MirrorStatus.starting()),
        )
        self._publish_mirror_status(status)
        return status

    def stop_mirror(self) -> None:
        self._mirror.stop()
        self._publish_mirror_status(MirrorStatus.inactive())

    def get_mirror_status(self) -> MirrorStatus:
        return self._mirror.status()

    @property
    def mirror_tool_available(self) -> bool:
        return self._scrcpy.is_tool_available()

    def _handle_mirror_exit(self) -> None:
        self._publish_mirror_status(MirrorStatus.inactive())

    def _publish_mirror_status(self, status: MirrorStatus) -> None:
        with self._lock:
            if status == self._last_mirror_status:
                return
            self._last_mirror_status = status
            callbacks = list(self._mirror_callbacks)

        for callback in callbacks:
            try:
                callback(status)
            except Exception as e:
                logger.warning(f"Error in mirror status callback: {e}")

    # ------------------------------------------------------------------
    # Destination
    # ------------------------------------------------------------------
    def select_destination(self, picker: Callable[[], Optional[str]]) -> Optional[DestinationInfo]:
        """
        Ask `picker` for a folder, classify it and remember it.

        Args:
            picker: Returns the chosen folder, or None if the user backed out.

        Returns:
            The new destination, or None if nothing was picked.
        """
        path = picker()
        if not path:
            return None

        info = DestinationInfo(path=path, filesystem=self._classify(path))
        try:
            self._settings.save_destination(info)
        except SettingsError as e:
            logger.error(f"Could not save destination: {e}")
        return info

    def get_destination(self) -> Optional[DestinationInfo]:
        return self._settings.load_destination()

    # ------------------------------------------------------------------
    # Transfer
    # ------------------------------------------------------------------
    def start_transfer(
        self,
        files: Sequence[str],
        dest_path: str,
        filesystem_type: Union[FilesystemType, str, None],
    ) -> TransferStartResult:
        """
        Prescreen a batch and start it if nothing needs confirming.

        Returns:
            needs_warning with the oversized files (nothing started), or
            started=True/False.
        """
        if self._orchestrator.is_transferring:
            return TransferStartResult(needs_warning=False, started=False)

        if not isinstance(filesystem_type, FilesystemType):
            filesystem_type = FilesystemType.parse(filesystem_type)

        result = self._prescreen.prescreen(files, dest_path, filesystem_type)
        if result.needs_warning:
            return TransferStartResult(needs_warning=True, large_files=result.warning)

        started = self._orchestrator.start(result.files, dest_path)
        return TransferStartResult(needs_warning=False, started=started)

    def confirm_transfer(self) -> bool:
        return self._prescreen.confirm_pending()

    def cancel_transfer(self) -> None:
        self._orchestrator.cancel()

    def wait_for_transfer(self, timeout: Optional[float] = None) -> bool:
        """Block until the running batch ends. True if none is running."""
        return self._orchestrator.join(timeout)

    @property
    def is_transferring(self) -> bool:
        return self._orchestrator.is_transferring
