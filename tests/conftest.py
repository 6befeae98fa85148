"""
Pytest configuration and fixtures for VideoFlux tests.

This module provides common fixtures used across the test suite,
including a scripted command channel and fake managed processes that
stand in for adb and scrcpy.
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

import pytest

from videoflux.config import Config
from videoflux.core.bridge.channel import CommandResult


# Test device data
TEST_DEVICE_ID = "R58N12ABCDE"
TEST_DEVICE_NAME = "Pixel 7"
TEST_VIDEO_DIR = "/sdcard/DCIM/Camera"


class FakeProcess:
    """
    Stand-in for ManagedProcess.

    wait() reports "still running" for `ticks` calls (running `on_tick`
    each time) and then exits with `exit_code`.
    """

    def __init__(
        self,
        exit_code: int = 0,
        stderr: str = "",
        ticks: int = 0,
        on_tick: Optional[Callable[[], None]] = None,
        pid: int = 4242,
    ):
        self.pid = pid
        self.stderr_text = stderr
        self.args: list[str] = []
        self.group_signals: list[int] = []
        self.signals: list[int] = []
        self.group_kill_error: Optional[OSError] = None
        self.kill_error: Optional[OSError] = None

        self._final_code = exit_code
        self._ticks = ticks
        self._on_tick = on_tick
        self._exited = False
        self._exit_callbacks: list[Callable[[int], None]] = []

    @property
    def exit_code(self) -> Optional[int]:
        return self._final_code if self._exited else None

    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        if self._ticks > 0:
            self._ticks -= 1
            if self._on_tick is not None:
                self._on_tick()
            return None
        self._exited = True
        return self._final_code

    def on_exit(self, callback: Callable[[int], None]) -> None:
        self._exit_callbacks.append(callback)

    def finish(self, code: int = 0) -> None:
        """Simulate the process exiting on its own."""
        self._exited = True
        self._final_code = code
        for callback in list(self._exit_callbacks):
            callback(code)

    def kill_group(self, sig: int) -> None:
        if self.group_kill_error is not None:
            raise self.group_kill_error
        self.group_signals.append(sig)

    def kill(self, sig: int) -> None:
        if self.kill_error is not None:
            raise self.kill_error
        self.signals.append(sig)


Response = Union[CommandResult, Exception, Callable[[list[str]], CommandResult]]


class FakeChannel:
    """
    Scripted stand-in for CommandChannel.

    run() looks up the exact argument list in the registered responses and
    falls back to `default`. spawn() hands out the queued processes in
    order (an exception in the queue is raised instead).
    """

    def __init__(self, executable: str = "adb", available: bool = True):
        self.executable = executable
        self.available = available
        self.default: Response = CommandResult(stderr="unexpected command", exit_code=1)

        self.run_calls: list[list[str]] = []
        self.spawn_calls: list[dict] = []
        self.processes: list[Union[FakeProcess, Exception]] = []

        self._responses: dict[tuple[str, ...], Response] = {}

    def is_tool_available(self) -> bool:
        return self.available

    def respond(
        self,
        args: Sequence[str],
        stdout: str = "",
        stderr: str = "",
        exit_code: int = 0,
        error: Optional[Exception] = None,
    ) -> None:
        """Register the result of running `args`."""
        if error is not None:
            self._responses[tuple(args)] = error
        else:
            self._responses[tuple(args)] = CommandResult(stdout, stderr, exit_code)

    def set_file_size(self, path: str, size: int) -> None:
        """Register the answer to a remote size query."""
        self.respond(["shell", f"stat -c %s {shlex.quote(path)}"], stdout=f"{size}\n")

    def run(self, args: Sequence[str], timeout: Optional[float] = None) -> CommandResult:
        args = list(args)
        self.run_calls.append(args)
        response = self._responses.get(tuple(args), self.default)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(args)
        return response

    def spawn(
        self,
        args: Sequence[str],
        detached: bool = False,
        capture_stderr: bool = True,
    ):
        self.spawn_calls.append({
            "args": list(args),
            "detached": detached,
            "capture_stderr": capture_stderr,
        })
        item = self.processes.pop(0) if self.processes else FakeProcess()
        if isinstance(item, Exception):
            raise item
        item.args = list(args)
        return item


@pytest.fixture
def adb() -> FakeChannel:
    """Scripted adb channel."""
    return FakeChannel("adb")


@pytest.fixture
def scrcpy() -> FakeChannel:
    """Scripted scrcpy channel."""
    return FakeChannel("scrcpy")


@pytest.fixture
def dest_dir(tmp_path: Path) -> Path:
    """Empty local destination folder."""
    path = tmp_path / "dest"
    path.mkdir()
    return path


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with temporary directories."""
    return Config(
        config_dir=tmp_path / "config",
        settings_file=tmp_path / "config" / "settings.json",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def make_process() -> Callable[..., FakeProcess]:
    """Factory for fake managed processes."""
    return FakeProcess
