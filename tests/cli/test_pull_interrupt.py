"""
Tests for interrupting 'videoflux videos pull' from the terminal.

The CLI runs as a real child process in its own session, with a stand-in
adb script, and receives SIGINT the way a terminal delivers Ctrl-C: to
the whole foreground process group.
"""

from __future__ import annotations

import os
import signal
import subprocess
import sys
import textwrap
import time
from pathlib import Path

import pytest

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX process groups")

CAMERA = "/sdcard/DCIM/Camera"
VIDEO_SIZE = 4096
REPO_ROOT = Path(__file__).resolve().parents[2]


def write_fake_adb(tmp_path: Path, started_dir: Path) -> Path:
    """An adb stand-in whose pulls take a couple of seconds."""
    script = tmp_path / "adb"
    script.write_text(textwrap.dedent(f"""\
        #!{sys.executable}
        import sys
        import time
        from pathlib import Path

        args = sys.argv[1:]
        if args[0] == "shell":
            print({VIDEO_SIZE})
        elif args[0] == "pull":
            local = Path(args[2])
            (Path({str(started_dir)!r}) / local.name).touch()
            time.sleep(2)
            local.write_bytes(b"x" * {VIDEO_SIZE})
        """))
    script.chmod(0o755)
    return script


def restore_default_sigint() -> None:
    signal.signal(signal.SIGINT, signal.SIG_DFL)


def wait_for(path: Path, timeout: float) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if path.exists():
            return True
        time.sleep(0.05)
    return False


class TestPullInterrupt:
    """Tests for Ctrl-C during a pull."""

    def test_ctrl_c_lets_current_file_finish(self, tmp_path: Path) -> None:
        """Ctrl-C should finish the running pull, skip the rest and summarise."""
        started_dir = tmp_path / "started"
        started_dir.mkdir()
        dest = tmp_path / "dest"
        dest.mkdir()
        adb = write_fake_adb(tmp_path, started_dir)

        env = dict(os.environ)
        env.update({
            "PYTHONPATH": os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")])),
            "VIDEOFLUX_ADB": str(adb),
            "VIDEOFLUX_CONFIG_DIR": str(tmp_path / "config"),
            "VIDEOFLUX_SETTINGS_FILE": str(tmp_path / "config" / "settings.json"),
            "VIDEOFLUX_LOG_DIR": str(tmp_path / "logs"),
            "VIDEOFLUX_LOG_TO_FILE": "0",
            "VIDEOFLUX_PROGRESS_INTERVAL": "0.1",
        })

        proc = subprocess.Popen(
            [
                sys.executable, "-m", "videoflux.cli.main",
                "--config", str(tmp_path / "config.json"),
                "videos", "pull", "--dest", str(dest),
                f"{CAMERA}/a.mp4", f"{CAMERA}/b.mp4",
            ],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            cwd=tmp_path,
            env=env,
            start_new_session=True,
            preexec_fn=restore_default_sigint,
        )
        try:
            assert wait_for(started_dir / "a.mp4", timeout=20), "first pull never started"
            os.killpg(proc.pid, signal.SIGINT)
            output, _ = proc.communicate(timeout=30)
        finally:
            if proc.poll() is None:
                os.killpg(proc.pid, signal.SIGKILL)
                proc.communicate()

        assert proc.returncode == 0, output
        assert (dest / "a.mp4").stat().st_size == VIDEO_SIZE
        assert not (dest / "b.mp4").exists()
        assert not (started_dir / "b.mp4").exists()
        assert "Transfer cancelled" in output
        assert "Transferred 1 files" in output
        assert "Failed" not in output
