"""
Tests for the command channel.

subprocess is patched so no external tool is needed.
"""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from videoflux.core.bridge.channel import CommandChannel, CommandResult
from videoflux.exceptions import (
    CommandTimeoutError,
    ToolNotInstalledError,
    TransportError,
)


class TestCommandResult:
    """Tests for CommandResult."""

    def test_ok(self) -> None:
        """ok should be true only for exit code 0."""
        assert CommandResult(exit_code=0).ok is True
        assert CommandResult(exit_code=1).ok is False

    def test_output_joins_streams(self) -> None:
        """output should combine stdout and stderr."""
        result = CommandResult(stdout="out", stderr="err")
        assert result.output == "out\nerr"

    def test_output_skips_empty_stream(self) -> None:
        """output should leave out an empty stream."""
        assert CommandResult(stderr="err").output == "err"


class TestCommandChannel:
    """Tests for CommandChannel."""

    def test_run_prefixes_executable(self) -> None:
        """run() should put the executable in front of the arguments."""
        completed = subprocess.CompletedProcess(["adb", "devices"], 0, "List\n", "")
        with patch("videoflux.core.bridge.channel.subprocess.run", return_value=completed) as mock_run:
            channel = CommandChannel("adb", timeout=7)
            result = channel.run(["devices"])

        assert mock_run.call_args.args[0] == ["adb", "devices"]
        assert mock_run.call_args.kwargs["timeout"] == 7
        assert result.stdout == "List\n"
        assert result.ok

    def test_run_nonzero_exit_is_a_result(self) -> None:
        """A command that runs and fails should not raise."""
        completed = subprocess.CompletedProcess(["adb"], 1, "", "error: no devices")
        with patch("videoflux.core.bridge.channel.subprocess.run", return_value=completed):
            result = CommandChannel("adb").run(["shell", "ls"])

        assert result.exit_code == 1
        assert result.stderr == "error: no devices"

    def test_run_missing_tool(self) -> None:
        """A missing executable should raise ToolNotInstalledError."""
        with patch(
            "videoflux.core.bridge.channel.subprocess.run",
            side_effect=FileNotFoundError("adb"),
        ):
            with pytest.raises(ToolNotInstalledError) as exc_info:
                CommandChannel("adb").run(["devices"])

        assert exc_info.value.tool == "adb"

    def test_run_timeout(self) -> None:
        """A hung command should raise CommandTimeoutError."""
        with patch(
            "videoflux.core.bridge.channel.subprocess.run",
            side_effect=subprocess.TimeoutExpired(["adb"], 2),
        ):
            with pytest.raises(CommandTimeoutError) as exc_info:
                CommandChannel("adb").run(["devices"], timeout=2)

        assert exc_info.value.timeout == 2
        assert isinstance(exc_info.value, TransportError)

    def test_run_os_error(self) -> None:
        """Other launch failures should raise TransportError."""
        with patch(
            "videoflux.core.bridge.channel.subprocess.run",
            side_effect=PermissionError("denied"),
        ):
            with pytest.raises(TransportError):
                CommandChannel("adb").run(["devices"])

    def test_is_tool_available(self) -> None:
        """is_tool_available should follow PATH lookup."""
        with patch("videoflux.core.bridge.channel.shutil.which", return_value="/usr/bin/adb"):
            assert CommandChannel("adb").is_tool_available() is True
        with patch("videoflux.core.bridge.channel.shutil.which", return_value=None):
            assert CommandChannel("adb").is_tool_available() is False

    def test_spawn_passes_options(self) -> None:
        """spawn() should forward the command and flags to ManagedProcess."""
        with patch("videoflux.core.bridge.channel.ManagedProcess") as MockProcess:
            MockProcess.spawn.return_value = MagicMock()
            CommandChannel("scrcpy").spawn(["--no-audio"], detached=True, capture_stderr=False)

        MockProcess.spawn.assert_called_once_with(
            ["scrcpy", "--no-audio"],
            detached=True,
            capture_stderr=False,
        )

    def test_spawn_missing_tool(self) -> None:
        """spawn should raise ToolNotInstalledError for a missing executable."""
        with patch("videoflux.core.bridge.channel.ManagedProcess") as MockProcess:
            MockProcess.spawn.side_effect = FileNotFoundError("scrcpy")
            with pytest.raises(ToolNotInstalledError):
                CommandChannel("scrcpy").spawn([])

    def test_spawn_os_error(self) -> None:
        """spawn should raise TransportError when the launch fails."""
        with patch("videoflux.core.bridge.channel.ManagedProcess") as MockProcess:
            MockProcess.spawn.side_effect = OSError("exec format error")
            with pytest.raises(TransportError):
                CommandChannel("scrcpy").spawn([])
