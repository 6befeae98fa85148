"""
Tests for the screen mirror lifecycle.
"""

from __future__ import annotations

import signal

from videoflux.core.mirror.manager import MirrorManager, MirrorState, MirrorStatus
from videoflux.exceptions import ToolNotInstalledError, TransportError


class TestMirrorStart:
    """Tests for MirrorManager.start()."""

    def test_start_spawns_detached(self, scrcpy) -> None:
        """start() should launch scrcpy detached with the extra args."""
        manager = MirrorManager(scrcpy, extra_args=["--no-audio"])

        status = manager.start()

        assert status == MirrorStatus.active()
        assert manager.is_active
        assert scrcpy.spawn_calls == [
            {"args": ["--no-audio"], "detached": True, "capture_stderr": False}
        ]

    def test_double_start_spawns_once(self, scrcpy) -> None:
        """A second start() while active should not launch again."""
        manager = MirrorManager(scrcpy)

        assert manager.start().is_active
        assert manager.start().is_active

        assert len(scrcpy.spawn_calls) == 1

    def test_starting_reported_before_spawn(self, scrcpy) -> None:
        """on_starting should run after the tool check and before the launch."""
        spawned_before: list[int] = []
        manager = MirrorManager(scrcpy)

        manager.start(on_starting=lambda: spawned_before.append(len(scrcpy.spawn_calls)))

        assert spawned_before == [0]
        assert len(scrcpy.spawn_calls) == 1

    def test_starting_not_reported_when_active(self, scrcpy) -> None:
        """A second start while running should not announce a launch."""
        calls: list[str] = []
        manager = MirrorManager(scrcpy)
        manager.start()

        manager.start(on_starting=lambda: calls.append("starting"))

        assert calls == []

    def test_tool_not_on_path(self, scrcpy) -> None:
        """A missing scrcpy should report tool_not_installed."""
        scrcpy.available = False
        manager = MirrorManager(scrcpy)

        status = manager.start()

        assert status.state == MirrorState.TOOL_NOT_INSTALLED
        assert scrcpy.spawn_calls == []
        assert not manager.is_active

    def test_tool_vanished(self, scrcpy) -> None:
        """scrcpy disappearing at launch should report tool_not_installed."""
        scrcpy.processes.append(ToolNotInstalledError("scrcpy"))

        status = MirrorManager(scrcpy).start()

        assert status == MirrorStatus.tool_not_installed()

    def test_launch_failure_is_error(self, scrcpy) -> None:
        """A failed launch should be an error status."""
        scrcpy.processes.append(TransportError(["scrcpy"], "exec format error"))
        manager = MirrorManager(scrcpy)

        status = manager.start()

        assert status.state == MirrorState.ERROR
        assert "exec format error" in status.message
        assert not manager.is_active

    def test_restart_after_exit(self, scrcpy, make_process) -> None:
        """start() after the mirror exited should launch a new one."""
        first = make_process(pid=1)
        scrcpy.processes.extend([first, make_process(pid=2)])
        manager = MirrorManager(scrcpy)

        manager.start()
        first.finish(0)
        manager.start()

        assert len(scrcpy.spawn_calls) == 2
        assert manager.is_active


class TestMirrorExit:
    """Tests for exit handling."""

    def test_unexpected_exit_calls_back_once(self, scrcpy, make_process) -> None:
        """An exit on its own should call back exactly once."""
        process = make_process()
        scrcpy.processes.append(process)
        calls: list[str] = []
        manager = MirrorManager(scrcpy)

        manager.start(on_unexpected_exit=lambda: calls.append("exit"))
        process.finish(1)
        process.finish(1)

        assert calls == ["exit"]
        assert not manager.is_active
        assert manager.status() == MirrorStatus.inactive()

    def test_stop_does_not_call_back(self, scrcpy, make_process) -> None:
        """A requested stop should not count as an unexpected exit."""
        process = make_process()
        scrcpy.processes.append(process)
        calls: list[str] = []
        manager = MirrorManager(scrcpy)

        manager.start(on_unexpected_exit=lambda: calls.append("exit"))
        manager.stop()
        process.finish(-15)

        assert calls == []

    def test_failing_callback_is_contained(self, scrcpy, make_process) -> None:
        """A failing exit callback should not propagate."""
        process = make_process()
        scrcpy.processes.append(process)
        manager = MirrorManager(scrcpy)

        def explode() -> None:
            raise RuntimeError("boom")

        manager.start(on_unexpected_exit=explode)
        process.finish(1)

        assert not manager.is_active


class TestMirrorStop:
    """Tests for MirrorManager.stop()."""

    def test_stop_signals_group(self, scrcpy, make_process) -> None:
        """stop() should send SIGTERM to the process group."""
        process = make_process()
        scrcpy.processes.append(process)
        manager = MirrorManager(scrcpy)

        manager.start()
        manager.stop()

        assert process.group_signals == [signal.SIGTERM]
        assert process.signals == []
        assert not manager.is_active

    def test_stop_falls_back_to_process(self, scrcpy, make_process) -> None:
        """stop() should signal the process when the group can't be signalled."""
        process = make_process()
        process.group_kill_error = OSError("no such process group")
        scrcpy.processes.append(process)
        manager = MirrorManager(scrcpy)

        manager.start()
        manager.stop()

        assert process.signals == [signal.SIGTERM]

    def test_stop_tolerates_dead_process(self, scrcpy, make_process) -> None:
        """stop() should ignore a process that is already gone."""
        process = make_process()
        process.group_kill_error = ProcessLookupError("gone")
        process.kill_error = ProcessLookupError("gone")
        scrcpy.processes.append(process)
        manager = MirrorManager(scrcpy)

        manager.start()
        manager.stop()

        assert not manager.is_active

    def test_stop_when_inactive(self, scrcpy) -> None:
        """stop() with nothing running should do nothing."""
        MirrorManager(scrcpy).stop()


class TestMirrorStatus:
    """Tests for MirrorStatus values."""

    def test_to_dict(self) -> None:
        """to_dict should include the message only for errors."""
        assert MirrorStatus.active().to_dict() == {"status": "active"}
        assert MirrorStatus.tool_not_installed().to_dict() == {"status": "scrcpy-not-installed"}
        assert MirrorStatus.error("boom").to_dict() == {"status": "error", "message": "boom"}
