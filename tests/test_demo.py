from __future__ import annotations

import logging
from pathlib import Path

import pytest

from trayicon.__main__ import configure_logging, demo_menu, draw_icon


def test_demo_menu_shape() -> None:
    menu = demo_menu()
    labels = [getattr(node, "label", None) for node in menu]
    assert labels[0] == "Item 4 Set Tooltip"
    assert labels[-1] == "E&xit"
    assert menu.get_checkable("check-item1") is True


def test_draw_icon_size() -> None:
    icon = draw_icon("#ff0000", size=16)
    assert (icon.width, icon.height) == (16, 16)
    # Corners stay transparent.
    assert icon.argb_pixels[0] == 0


def test_configure_logging_levels(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    log_file = tmp_path / "tray.log"
    monkeypatch.setenv("TRAYICON_LOG_LEVEL", "warning")
    monkeypatch.setenv("TRAYICON_LOG_FILE", str(log_file))
    root = logging.getLogger()
    saved = list(root.handlers)
    saved_level = root.level
    try:
        configure_logging()
        levels = sorted(handler.level for handler in root.handlers)
        assert levels == [logging.DEBUG, logging.WARNING]
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved:
            root.addHandler(handler)
        root.setLevel(saved_level)
