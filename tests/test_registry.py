from __future__ import annotations

from trayicon.icon import Icon
from trayicon.linux.registry import ItemRegistry
from trayicon.status import TrayIconStatus


def test_initial_state(red_icon: Icon) -> None:
    registry = ItemRegistry("item-1", "/MenuBar", icon=red_icon, tooltip="tip", title="App")
    state = registry.state
    assert state.item_id == "item-1"
    assert state.menu_path == "/MenuBar"
    assert state.status is TrayIconStatus.ACTIVE
    assert registry.icon_pixmap() == [[4, 4, red_icon.argb_pixels]]
    assert registry.tooltip_value() == ["", [], "tip", ""]


def test_setters_report_changes(red_icon: Icon, green_icon: Icon) -> None:
    registry = ItemRegistry("item", "/MenuBar", icon=red_icon)
    assert registry.set_icon(red_icon) is False
    assert registry.set_icon(green_icon) is True
    assert registry.set_tooltip("") is False
    assert registry.set_tooltip("busy") is True
    assert registry.set_title("Title") is True
    assert registry.set_status("NeedsAttention") is True
    assert registry.state.status is TrayIconStatus.NEEDS_ATTENTION
    assert registry.set_status(TrayIconStatus.NEEDS_ATTENTION) is False


def test_icon_name_falls_back_without_pixmap(red_icon: Icon) -> None:
    registry = ItemRegistry("item", "/MenuBar")
    assert registry.icon_pixmap() == []
    assert registry.icon_name("application-x-executable") == "application-x-executable"
    registry.set_icon(red_icon)
    assert registry.icon_name("application-x-executable") == ""


def test_previous_state_is_never_modified(red_icon: Icon) -> None:
    registry = ItemRegistry("item", "/MenuBar", tooltip="before")
    snapshot = registry.state
    registry.set_tooltip("after")
    registry.set_icon(red_icon)
    assert snapshot.tooltip == "before"
    assert snapshot.pixmaps == ()
