"""
Configuration for VideoFlux.

Values come from three layers, highest precedence first:

1. ``VIDEOFLUX_*`` environment variables (a ``.env`` file is honoured)
2. ``~/.videoflux/config.json``
3. Built-in defaults from ``videoflux.constants``

Example:
    config = get_config()
    channel = CommandChannel(config.bridge.executable, config.bridge.command_timeout)
"""

from __future__ import annotations

import json
import logging
import os
import shlex
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv

from videoflux.constants import (
    BRIDGE_EXECUTABLE,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILE,
    DEFAULT_LOG_DIR,
    DEFAULT_SETTINGS_FILE,
    DEVICE_POLL_INTERVAL,
    MIRROR_EXECUTABLE,
    PROGRESS_POLL_INTERVAL,
    REMOTE_VIDEO_DIR,
)

logger = logging.getLogger(__name__)


def _section_from_dict(cls, data: Any):
    """Build a section dataclass, ignoring keys it doesn't define."""
    if not isinstance(data, dict):
        return cls()
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        logger.warning(f"Ignoring unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    return cls(**{key: value for key, value in data.items() if key in known})


@dataclass
class BridgeConfig:
    """How to reach adb and where the videos live on the device."""

    executable: str = BRIDGE_EXECUTABLE
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    remote_video_dir: str = REMOTE_VIDEO_DIR


@dataclass
class MirrorConfig:
    """How to launch scrcpy."""

    executable: str = MIRROR_EXECUTABLE
    extra_args: list[str] = field(default_factory=list)


@dataclass
class MonitorConfig:
    poll_interval: float = DEVICE_POLL_INTERVAL


@dataclass
class TransferConfig:
    progress_interval: float = PROGRESS_POLL_INTERVAL


def _to_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# env var -> (section or None for top level, key, converter)
ENV_OVERRIDES: dict[str, tuple[Optional[str], str, Callable[[str], Any]]] = {
    "VIDEOFLUX_CONFIG_DIR": (None, "config_dir", Path),
    "VIDEOFLUX_SETTINGS_FILE": (None, "settings_file", Path),
    "VIDEOFLUX_LOG_DIR": (None, "log_dir", Path),
    "VIDEOFLUX_LOG_LEVEL": (None, "log_level", str.upper),
    "VIDEOFLUX_LOG_TO_FILE": (None, "log_to_file", _to_bool),
    "VIDEOFLUX_ADB": ("bridge", "executable", str),
    "VIDEOFLUX_COMMAND_TIMEOUT": ("bridge", "command_timeout", float),
    "VIDEOFLUX_REMOTE_DIR": ("bridge", "remote_video_dir", str),
    "VIDEOFLUX_SCRCPY": ("mirror", "executable", str),
    "VIDEOFLUX_SCRCPY_ARGS": ("mirror", "extra_args", shlex.split),
    "VIDEOFLUX_POLL_INTERVAL": ("monitor", "poll_interval", float),
    "VIDEOFLUX_PROGRESS_INTERVAL": ("transfer", "progress_interval", float),
}

SECTIONS = {
    "bridge": BridgeConfig,
    "mirror": MirrorConfig,
    "monitor": MonitorConfig,
    "transfer": TransferConfig,
}


@dataclass
class Config:
    """
    All VideoFlux settings.

    The settings file (destination folder) is separate from this config;
    config is for how the tools are run, settings are what the user picked.
    """

    config_dir: Path = DEFAULT_CONFIG_DIR
    settings_file: Path = DEFAULT_SETTINGS_FILE
    log_dir: Path = DEFAULT_LOG_DIR

    bridge: BridgeConfig = field(default_factory=BridgeConfig)
    mirror: MirrorConfig = field(default_factory=MirrorConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    transfer: TransferConfig = field(default_factory=TransferConfig)

    log_level: str = "INFO"
    log_to_file: bool = False

    def __post_init__(self) -> None:
        for name in ("config_dir", "settings_file", "log_dir"):
            setattr(self, name, Path(getattr(self, name)).expanduser())

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> Config:
        """
        Read the config file, then apply environment overrides.

        A missing or unreadable file falls back to defaults; an invalid
        environment value is logged and skipped.

        Args:
            config_path: Config file to read. Defaults to ~/.videoflux/config.json.
        """
        load_dotenv()

        config_path = Path(config_path) if config_path else DEFAULT_CONFIG_FILE
        data = cls._read_file(config_path)
        cls._merge_env(data, os.environ)
        return cls.from_dict(data)

    @staticmethod
    def _read_file(config_path: Path) -> dict[str, Any]:
        if not config_path.exists():
            return {}
        try:
            data = json.loads(config_path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring config file {config_path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {config_path}: not a JSON object")
            return {}
        logger.debug(f"Loaded config from {config_path}")
        return data

    @staticmethod
    def _merge_env(data: dict[str, Any], environ: Any) -> None:
        for env_var, (section, key, convert) in ENV_OVERRIDES.items():
            raw = environ.get(env_var)
            if raw is None:
                continue
            try:
                value = convert(raw)
            except ValueError as e:
                logger.warning(f"Ignoring {env_var}={raw!r}: {e}")
                continue

            target = data if section is None else data.setdefault(section, {})
            target[key] = value

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a Config from parsed JSON (plus overrides)."""
        kwargs: dict[str, Any] = {
            name: _section_from_dict(section_cls, data.get(name))
            for name, section_cls in SECTIONS.items()
        }
        for name in ("config_dir", "settings_file", "log_dir", "log_level"):
            if name in data:
                kwargs[name] = data[name]
        if "log_to_file" in data:
            kwargs["log_to_file"] = bool(data["log_to_file"])
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for name in ("config_dir", "settings_file", "log_dir"):
            data[name] = str(data[name])
        return data

    def save(self, config_path: Optional[Path] = None) -> None:
        """Write the config as JSON, creating the folder if needed."""
        config_path = Path(config_path) if config_path else DEFAULT_CONFIG_FILE
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info(f"Saved config to {config_path}")

    def ensure_directories(self) -> None:
        for directory in (self.config_dir, self.settings_file.parent, self.log_dir):
            directory.mkdir(parents=True, exist_ok=True)


_config: Optional[Config] = None


def get_config() -> Config:
    """Process-wide config, loaded on first use."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def reload_config(config_path: Optional[Path] = None) -> Config:
    """Reload the process-wide config, optionally from another file."""
    global _config
    _config = Config.load(config_path)
    return _config
