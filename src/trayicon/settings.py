"""Persistent tray settings and convenience helpers."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

SETTINGS_ENV_VAR = "TRAYICON_SETTINGS_PATH"


@dataclass
class TraySettings:
    """Bus names, object paths and defaults used to publish the status item."""

    # Empty means the session bus from the environment
    bus_address: str = ""
    item_path: str = "/StatusNotifierItem"
    menu_path: str = "/MenuBar"
    watcher_name: str = "org.kde.StatusNotifierWatcher"
    watcher_path: str = "/StatusNotifierWatcher"
    name_prefix: str = "org.kde.StatusNotifierItem"
    category: str = "ApplicationStatus"
    fallback_icon_name: str = "application-x-executable"
    text_direction: str = "ltr"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the settings to a dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TraySettings":
        """Create a settings instance from a dictionary payload.

        Unknown keys are ignored; values are coerced to strings.
        """
        data = dict(payload)
        return cls(
            **{
                name: str(data[name]) if name in data else getattr(cls, name)
                for name in cls.__annotations__
            }
        )

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "TraySettings":
        """Load settings from disk, falling back to defaults."""
        settings_path = path or default_settings_path()
        if settings_path.is_file():
            try:
                payload = json.loads(settings_path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError):
                payload = {}
            if not isinstance(payload, dict):
                payload = {}
            return cls.from_dict(payload)
        return cls()

    def save(self, path: Optional[Path] = None) -> None:
        """Persist the settings to disk."""
        settings_path = path or default_settings_path()
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        serialized = json.dumps(self.to_dict(), indent=2, sort_keys=True)
        settings_path.write_text(serialized, encoding="utf-8")


def default_settings_path() -> Path:
    """Resolve the path used to persist settings."""
    override = os.getenv(SETTINGS_ENV_VAR)
    if override:
        return Path(override)
    config_home = os.getenv("XDG_CONFIG_HOME")
    if config_home:
        base = Path(config_home)
    else:
        base = Path.home() / ".config"
    return base / "trayicon" / "settings.json"
