"""
Managed external processes.

ManagedProcess wraps a subprocess.Popen with the handful of operations
the engine needs from a long-running external tool: wait with a timeout,
an exit callback, and signalling either the whole process group or the
process itself.

Example:
    proc = ManagedProcess.spawn(["scrcpy"], detached=True, capture_stderr=False)
    proc.on_exit(lambda code: print(f"mirror exited with {code}"))
    ...
    proc.kill_group(signal.SIGTERM)
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from typing import Callable, Optional, Sequence

logger = logging.getLogger(__name__)


class ManagedProcess:
    """
    A spawned external process.

    Attributes:
        pid: Operating system process id
        args: Command line the process was started with
        exit_code: Exit code, or None while the process is running
        stderr_text: Captured standard error (complete once exited)
    """

    def __init__(self, popen: subprocess.Popen, args: Sequence[str]):
        self._popen = popen
        self._args = list(args)
        self._stderr_chunks: list[str] = []
        self._reader: Optional[threading.Thread] = None

        # Drain stderr continuously so a chatty tool can't block on a full pipe
        if popen.stderr is not None:
            self._reader = threading.Thread(
                target=self._drain_stderr,
                name=f"stderr-{popen.pid}",
                daemon=True,
            )
            self._reader.start()

    @classmethod
    def spawn(
        cls,
        args: Sequence[str],
        detached: bool = False,
        capture_stderr: bool = True,
    ) -> ManagedProcess:
        """
        Start a new process.

        Args:
            args: Full command line, executable first.
            detached: Start the process in its own session/process group
                      so it survives independently and can be killed as
                      a group.
            capture_stderr: Collect standard error for later inspection.

        Returns:
            ManagedProcess for the running process.

        Raises:
            OSError: If the executable can't be started.
        """
        kwargs: dict = {}
        if detached:
            if os.name == "nt":
                kwargs["creationflags"] = (
                    subprocess.CREATE_NEW_PROCESS_GROUP | subprocess.DETACHED_PROCESS
                )
            else:
                kwargs["start_new_session"] = True

        popen = subprocess.Popen(
            list(args),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE if capture_stderr else subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            **kwargs,
        )
        logger.debug(f"Spawned pid {popen.pid}: {' '.join(args)}")
        return cls(popen, args)

    @property
    def pid(self) -> int:
        """Operating system process id."""
        return self._popen.pid

    @property
    def args(self) -> list[str]:
        """Command line the process was started with."""
        return self._args

    @property
    def exit_code(self) -> Optional[int]:
        """Exit code, or None while the process is still running."""
        return self._popen.poll()

    @property
    def stderr_text(self) -> str:
        """Captured standard error."""
        if self._reader is not None and self._popen.poll() is not None:
            self._reader.join(timeout=1)
        return "".join(self._stderr_chunks)

    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        """
        Wait for the process to exit.

        Args:
            timeout: Seconds to wait. None waits forever.

        Returns:
            The exit code, or None if the timeout elapsed first.
        """
        try:
            code = self._popen.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            return None
        if self._reader is not None:
            self._reader.join(timeout=1)
        return code

    def on_exit(self, callback: Callable[[int], None]) -> None:
        """
        Call `callback(exit_code)` from a watcher thread once the process exits.

        Args:
            callback: Function receiving the exit code.
        """

        def watch() -> None:
            code = self._popen.wait()
            try:
                callback(code)
            except Exception as e:
                logger.warning(f"Error in exit callback for pid {self.pid}: {e}")

        threading.Thread(target=watch, name=f"watch-{self.pid}", daemon=True).start()

    def kill_group(self, sig: int) -> None:
        """
        Send a signal to the process group led by this process.

        Raises:
            OSError: If process groups aren't supported or the group is gone.
        """
        killpg = getattr(os, "killpg", None)
        if killpg is None:
            raise OSError("Process groups are not supported on this platform")
        killpg(self.pid, sig)

    def kill(self, sig: int) -> None:
        """Send a signal to this process only."""
        self._popen.send_signal(sig)

    def _drain_stderr(self) -> None:
        stream = self._popen.stderr
        if stream is None:
            return
        try:
            for line in stream:
                self._stderr_chunks.append(line)
        except (OSError, ValueError):
            # Stream closed underneath us
            pass
        finally:
            stream.close()

    def __repr__(self) -> str:
        return f"ManagedProcess(pid={self.pid}, exit_code={self.exit_code})"
