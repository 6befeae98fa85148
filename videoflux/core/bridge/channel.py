"""
Command channel to an external command-line tool.

A CommandChannel is bound to one executable (``adb`` or ``scrcpy``) and
offers the two primitives the engine is built on: run a one-shot command
and capture its output, or spawn a long-running process.

Example:
    adb = CommandChannel("adb")
    if adb.is_tool_available():
        result = adb.run(["devices"])
        print(result.stdout)
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence

from videoflux.constants import DEFAULT_COMMAND_TIMEOUT
from videoflux.core.bridge.process import ManagedProcess
from videoflux.exceptions import (
    CommandTimeoutError,
    ToolNotInstalledError,
    TransportError,
)

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Captured outcome of a finished command."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0

    @property
    def ok(self) -> bool:
        """Whether the command exited successfully."""
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """stdout and stderr combined, for error classification."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)


class CommandChannel:
    """
    Runs commands through a single external executable.

    Every argument list passed to run() and spawn() is prefixed with the
    executable. Failures to start the command at all raise TransportError
    (or ToolNotInstalledError); a command that runs and exits non-zero is
    a normal CommandResult.
    """

    def __init__(
        self,
        executable: str,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
    ):
        """
        Initialize the channel.

        Args:
            executable: Executable name or path (e.g. "adb").
            timeout: Default timeout for run() in seconds.
        """
        self._executable = executable
        self._timeout = timeout

    @property
    def executable(self) -> str:
        """Executable this channel runs."""
        return self._executable

    def is_tool_available(self) -> bool:
        """Check whether the executable can be found."""
        return shutil.which(self._executable) is not None

    def run(
        self,
        args: Sequence[str],
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """
        Run a command to completion.

        Args:
            args: Arguments after the executable.
            timeout: Seconds before giving up. Defaults to the channel timeout.

        Returns:
            CommandResult with captured output and exit code.

        Raises:
            ToolNotInstalledError: If the executable doesn't exist.
            CommandTimeoutError: If the command didn't finish in time.
            TransportError: If the command couldn't be executed.
        """
        cmd = [self._executable, *args]
        timeout = self._timeout if timeout is None else timeout

        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except FileNotFoundError as e:
            raise ToolNotInstalledError(self._executable) from e
        except subprocess.TimeoutExpired as e:
            raise CommandTimeoutError(cmd, timeout) from e
        except OSError as e:
            raise TransportError(cmd, str(e)) from e

        result = CommandResult(
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            exit_code=completed.returncode,
        )
        if not result.ok:
            logger.debug(f"{self._executable} returned {result.exit_code}: {result.stderr.strip()}")
        return result

    def spawn(
        self,
        args: Sequence[str],
        detached: bool = False,
        capture_stderr: bool = True,
    ) -> ManagedProcess:
        """
        Start a long-running command.

        Args:
            args: Arguments after the executable.
            detached: Run in a new session/process group.
            capture_stderr: Collect standard error.

        Returns:
            ManagedProcess handle.

        Raises:
            ToolNotInstalledError: If the executable doesn't exist.
            TransportError: If the process couldn't be started.
        """
        cmd = [self._executable, *args]
        try:
            return ManagedProcess.spawn(
                cmd,
                detached=detached,
                capture_stderr=capture_stderr,
            )
        except FileNotFoundError as e:
            raise ToolNotInstalledError(self._executable) from e
        except OSError as e:
            raise TransportError(cmd, str(e)) from e
