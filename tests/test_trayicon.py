from __future__ import annotations

import io
from typing import Any, List

import pytest
from PIL import Image

from trayicon import (
    Icon,
    IconLoadingError,
    IconMissingError,
    MenuBuilder,
    MenuItemNotFoundError,
    SenderMissingError,
    TrayIconBuilder,
    TrayIconStatus,
    TrayOSError,
    TrayState,
)
from trayicon.backend import create_backend, is_supported
from trayicon.linux.events import ActivationKind


def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", (4, 4), (0, 0, 255, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


def demo_menu() -> MenuBuilder:
    return (
        MenuBuilder()
        .checkable("Toggle", True, "toggle")
        .item("Disabled", "disabled", disabled=True)
        .separator()
        .item("Exit", "exit")
    )


@pytest.fixture
def received() -> List[Any]:
    return []


@pytest.fixture
def tray(connection, received: List[Any]):
    tray = (
        TrayIconBuilder()
        .sender(received.append)
        .icon_from_buffer(png_bytes())
        .tooltip("Cool Tray Icon")
        .title("Demo")
        .on_click("click")
        .on_double_click("double")
        .menu(demo_menu())
        .build(connection=connection, platform="linux")
    )
    yield tray
    tray.close()


def test_build_registers(tray, connection) -> None:
    assert tray.state is TrayState.REGISTERED
    assert set(connection.bus.exported) == {"/StatusNotifierItem", "/MenuBar"}
    state = tray.backend.registry.state
    assert state.tooltip == "Cool Tray Icon"
    assert state.title == "Demo"


def test_build_requires_icon(connection) -> None:
    with pytest.raises(IconMissingError):
        TrayIconBuilder().sender(print).build(connection=connection, platform="linux")


def test_build_requires_sender(connection, red_icon: Icon) -> None:
    with pytest.raises(SenderMissingError):
        TrayIconBuilder().icon(red_icon).build(connection=connection, platform="linux")


def test_bad_icon_buffer_fails_at_build(connection) -> None:
    builder = TrayIconBuilder().sender(print).icon_from_buffer(b"not an image")
    with pytest.raises(IconLoadingError):
        builder.build(connection=connection, platform="linux")
    assert connection.bus.exported == {}


def test_unsupported_platform() -> None:
    assert is_supported("linux")
    assert not is_supported("win32")
    with pytest.raises(TrayOSError):
        create_backend(platform="darwin", sender=print, icon=None)


def test_builder_when_and_item_is_menu(connection, red_icon: Icon) -> None:
    def configure(builder: TrayIconBuilder) -> TrayIconBuilder:
        return builder.item_is_menu().on_middle_click("middle")

    tray = (
        TrayIconBuilder()
        .sender(print)
        .icon(red_icon)
        .when(configure)
        .build(connection=connection, platform="linux")
    )
    with tray:
        assert tray.backend.registry.state.item_is_menu is True
        assert tray.backend.router.handlers.on_middle_click == "middle"
    assert tray.state is TrayState.UNREGISTERED


def test_checkable_round_trip(tray, connection) -> None:
    assert tray.get_item_checkable("toggle") is True
    tray.set_item_checkable("toggle", False)
    tray.set_item_disabled("disabled", False)
    assert tray.get_item_checkable("toggle") is False
    assert tray.get_item_checkable("exit") is None
    props = dict(tray.backend.adapter.group_properties([1, 2]))
    assert props[1]["toggle-state"].value == 0
    assert props[2]["enabled"].value is True


def test_mutating_unknown_item_raises(tray, connection) -> None:
    with pytest.raises(MenuItemNotFoundError):
        tray.set_item_checkable("missing", True)
    with pytest.raises(MenuItemNotFoundError):
        tray.set_item_checkable("exit", True)
    with pytest.raises(MenuItemNotFoundError):
        tray.set_item_disabled("missing", True)
    assert connection.submitted == []


def test_unchanged_values_are_skipped(tray, connection) -> None:
    tray.set_menu(demo_menu())
    tray.set_tooltip("Cool Tray Icon")
    tray.set_title("Demo")
    tray.set_status(TrayIconStatus.ACTIVE)
    tray.set_icon(Icon.from_buffer(png_bytes()))
    assert connection.submitted == []


def test_set_menu_replaces_tree(tray, connection) -> None:
    tray.set_menu(MenuBuilder().item("Another item", "another").item("Exit", "exit"))
    assert connection.submitted == ["_install_menu"]
    assert tray.get_item_checkable("toggle") is None
    assert tray.menu == MenuBuilder().item("Another item", "another").item("Exit", "exit")


def test_set_status(tray, connection) -> None:
    tray.set_status("NeedsAttention")
    assert connection.submitted == ["new_status"]
    assert tray.backend.registry.state.status is TrayIconStatus.NEEDS_ATTENTION


def test_icon_click_and_menu_click_are_delivered(tray, received: List[Any]) -> None:
    router = tray.backend.router
    router.on_icon_activate(ActivationKind.PRIMARY)
    router.on_menu_event(4, "clicked")
    tray.close()
    assert received == ["click", "exit"]


def test_show_menu_is_noop(tray) -> None:
    tray.show_menu()
    assert tray.get_xdg_activation_token() is None


def test_failed_backend_call_keeps_menu_mirror(tray) -> None:
    tray.close()
    with pytest.raises(TrayOSError):
        tray.set_item_checkable("toggle", False)
    with pytest.raises(TrayOSError):
        tray.set_item_disabled("disabled", False)
    assert tray.get_item_checkable("toggle") is True
    assert tray.menu == demo_menu()
