"""
Screen mirroring process lifecycle.

MirrorManager owns at most one scrcpy process. Starting while a mirror is
already running never launches a second one, and stopping signals the
whole process group so helper processes go down with it.

Example:
    mirror = MirrorManager(CommandChannel("scrcpy"))
    status = mirror.start(on_unexpected_exit=lambda: print("mirror closed"))
    ...
    mirror.stop()
"""

from __future__ import annotations

import logging
import signal
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from videoflux.core.bridge.channel import CommandChannel
from videoflux.core.bridge.process import ManagedProcess
from videoflux.exceptions import BridgeError, ToolNotInstalledError

logger = logging.getLogger(__name__)


class MirrorState(Enum):
    """Lifecycle state of the mirror."""

    INACTIVE = "inactive"
    ACTIVE = "active"
    STARTING = "starting"
    ERROR = "error"
    TOOL_NOT_INSTALLED = "scrcpy-not-installed"


@dataclass(frozen=True)
class MirrorStatus:
    """Mirror state plus an optional error message."""

    state: MirrorState
    message: Optional[str] = None

    @classmethod
    def inactive(cls) -> MirrorStatus:
        return cls(MirrorState.INACTIVE)

    @classmethod
    def active(cls) -> MirrorStatus:
        return cls(MirrorState.ACTIVE)

    @classmethod
    def starting(cls) -> MirrorStatus:
        return cls(MirrorState.STARTING)

    @classmethod
    def error(cls, message: str) -> MirrorStatus:
        return cls(MirrorState.ERROR, message=message)

    @classmethod
    def tool_not_installed(cls) -> MirrorStatus:
        return cls(MirrorState.TOOL_NOT_INSTALLED)

    @property
    def is_active(self) -> bool:
        return self.state == MirrorState.ACTIVE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data: dict[str, Any] = {"status": self.state.value}
        if self.state == MirrorState.ERROR:
            data["message"] = self.message
        return data


class MirrorManager:
    """
    Starts, stops and tracks the screen mirroring process.

    "Active" means the process was launched and hasn't exited; the manager
    doesn't wait for the mirror window to actually appear.
    """

    def __init__(
        self,
        channel: CommandChannel,
        extra_args: Optional[Sequence[str]] = None,
    ):
        """
        Initialize the mirror manager.

        Args:
            channel: Command channel bound to scrcpy.
            extra_args: Additional scrcpy arguments.
        """
        self._channel = channel
        self._extra_args = list(extra_args or [])

        self._process: Optional[ManagedProcess] = None
        self._on_exit: Optional[Callable[[], None]] = None
        self._lock = threading.RLock()

    @property
    def is_active(self) -> bool:
        """Whether a tracked mirror process is still running."""
        with self._lock:
            return self._process is not None and self._process.exit_code is None

    def status(self) -> MirrorStatus:
        """Current mirror status."""
        if self.is_active:
            return MirrorStatus.active()
        return MirrorStatus.inactive()

    def start(
        self,
        on_unexpected_exit: Optional[Callable[[], None]] = None,
        on_starting: Optional[Callable[[], None]] = None,
    ) -> MirrorStatus:
        """
        Launch the mirror unless one is already running.

        Args:
            on_unexpected_exit: Called once if the process exits or fails
                                on its own (not after stop()).
            on_starting: Called once scrcpy is found, just before launching.

        Returns:
            ACTIVE on launch or when already running, TOOL_NOT_INSTALLED
            when scrcpy is missing, ERROR if the launch failed.
        """
        with self._lock:
            if self.is_active:
                return MirrorStatus.active()

            if not self._channel.is_tool_available():
                return MirrorStatus.tool_not_installed()

            if on_starting is not None:
                on_starting()

            try:
                process = self._channel.spawn(
                    self._extra_args,
                    detached=True,
                    capture_stderr=False,
                )
            except ToolNotInstalledError:
                return MirrorStatus.tool_not_installed()
            except BridgeError as e:
                logger.error(f"Failed to start mirror: {e}")
                return MirrorStatus.error(str(e))

            self._process = process
            self._on_exit = on_unexpected_exit
            process.on_exit(lambda code: self._handle_exit(process, code))

        logger.info(f"Mirror started (pid {process.pid})")
        return MirrorStatus.active()

    def stop(self) -> None:
        """
        Terminate the mirror process group.

        Falls back to signalling the process itself when the group can't be
        signalled. A process that is already gone is not an error.
        """
        with self._lock:
            process = self._process
            self._process = None
            self._on_exit = None

        if process is None:
            return

        try:
            process.kill_group(signal.SIGTERM)
        except OSError as group_error:
            logger.debug(f"Group kill failed for pid {process.pid}: {group_error}")
            try:
                process.kill(signal.SIGTERM)
            except OSError:
                # Process already dead
                pass

        logger.info(f"Mirror stopped (pid {process.pid})")

    def _handle_exit(self, process: ManagedProcess, code: int) -> None:
        with self._lock:
            if self._process is not process:
                # Stopped or replaced; nothing to report
                return
            self._process = None
            callback = self._on_exit
            self._on_exit = None

        logger.info(f"Mirror exited with code {code}")
        if callback is not None:
            try:
                callback()
            except Exception as e:
                logger.warning(f"Error in mirror exit callback: {e}")
