"""
Persistent settings for VideoFlux.

Settings live in a small JSON document (~/.videoflux/settings.json by
default). Today the only key is the last selected destination; a missing
file, unreadable JSON or a missing key all mean "no destination".
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from videoflux.constants import DEFAULT_SETTINGS_FILE
from videoflux.core.transfer.models import DestinationInfo
from videoflux.exceptions import SettingsError

logger = logging.getLogger(__name__)

DESTINATION_KEY = "destination"


class SettingsStore:
    """
    Reads and writes the settings document.

    Example:
        store = SettingsStore()
        store.save_destination(DestinationInfo("/Volumes/SD", fs_info))
        print(store.load_destination())
    """

    def __init__(self, path: Optional[Path] = None):
        """
        Initialize the store.

        Args:
            path: Settings file. Defaults to ~/.videoflux/settings.json.
        """
        self._path = Path(path) if path else DEFAULT_SETTINGS_FILE

    @property
    def path(self) -> Path:
        return self._path

    def load_destination(self) -> Optional[DestinationInfo]:
        """The saved destination, or None if there isn't one."""
        data = self._read().get(DESTINATION_KEY)
        if not isinstance(data, dict) or not data.get("path"):
            return None
        return DestinationInfo.from_dict(data)

    def save_destination(self, info: DestinationInfo) -> None:
        """
        Save the destination, keeping any other settings.

        Raises:
            SettingsError: If the file can't be written.
        """
        settings = self._read()
        settings[DESTINATION_KEY] = info.to_dict()
        self._write(settings)
        logger.info(f"Saved destination {info.path}")

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to read settings from {self._path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, settings: dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w") as f:
                json.dump(settings, f, indent=2)
        except OSError as e:
            raise SettingsError(str(self._path), str(e)) from e
