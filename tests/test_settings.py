from __future__ import annotations

import json
from pathlib import Path

import pytest

from trayicon.settings import SETTINGS_ENV_VAR, TraySettings, default_settings_path


def test_defaults() -> None:
    settings = TraySettings()
    assert settings.item_path == "/StatusNotifierItem"
    assert settings.menu_path == "/MenuBar"
    assert settings.watcher_name == "org.kde.StatusNotifierWatcher"
    assert settings.bus_address == ""


def test_save_and_load(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    TraySettings(menu_path="/Menu", category="Communications").save(path)
    loaded = TraySettings.load(path)
    assert loaded.menu_path == "/Menu"
    assert loaded.category == "Communications"


def test_from_dict_ignores_unknown_keys() -> None:
    settings = TraySettings.from_dict({"item_path": "/Item", "bogus": 1})
    assert settings.item_path == "/Item"
    assert not hasattr(settings, "bogus")


def test_corrupt_or_missing_file_gives_defaults(tmp_path: Path) -> None:
    assert TraySettings.load(tmp_path / "missing.json") == TraySettings()
    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", encoding="utf-8")
    assert TraySettings.load(corrupt) == TraySettings()
    listing = tmp_path / "list.json"
    listing.write_text(json.dumps([1, 2]), encoding="utf-8")
    assert TraySettings.load(listing) == TraySettings()


def test_env_var_overrides_path(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    target = tmp_path / "custom.json"
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(target))
    assert default_settings_path() == target


def test_xdg_config_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert default_settings_path() == tmp_path / "trayicon" / "settings.json"
