"""Demo tray icon: ``python -m trayicon``."""

from __future__ import annotations

import logging
import os
import queue
import signal
import sys
from enum import Enum
from typing import Optional

from PIL import Image, ImageDraw

from trayicon import (
    Icon,
    Item,
    MenuBuilder,
    TrayIcon,
    TrayIconBuilder,
    TrayIconError,
    TrayIconStatus,
    TraySettings,
)

LOGGER = logging.getLogger("trayicon.demo")


class UserEvents(str, Enum):
    CLICK_TRAY_ICON = "click-tray-icon"
    DOUBLE_CLICK_TRAY_ICON = "double-click-tray-icon"
    RIGHT_CLICK_TRAY_ICON = "right-click-tray-icon"
    EXIT = "exit"
    ITEM1 = "item1"
    ITEM2 = "item2"
    ITEM3 = "item3"
    ITEM4 = "item4"
    DISABLED_ITEM1 = "disabled-item1"
    CHECK_ITEM1 = "check-item1"
    SUB_ITEM1 = "sub-item1"
    SUB_ITEM2 = "sub-item2"
    SUB_ITEM3 = "sub-item3"


def draw_icon(color: str, size: int = 32) -> Icon:
    """Render a filled circle icon."""
    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    margin = max(1, size // 8)
    draw.ellipse((margin, margin, size - margin - 1, size - margin - 1), fill=color)
    return Icon.from_image(image)


def demo_menu() -> MenuBuilder:
    return (
        MenuBuilder()
        .item("Item 4 Set Tooltip", UserEvents.ITEM4)
        .item("Item 3 Replace Menu", UserEvents.ITEM3)
        .item("Item 2 Change Icon Green", UserEvents.ITEM2)
        .item("Item 1 Change Icon Red", UserEvents.ITEM1)
        .separator()
        .submenu(
            "Sub Menu",
            MenuBuilder()
            .item("Sub item 1", UserEvents.SUB_ITEM1)
            .item("Sub Item 2", UserEvents.SUB_ITEM2)
            .item("Sub Item 3", UserEvents.SUB_ITEM3),
        )
        .checkable("This checkbox toggles disable", True, UserEvents.CHECK_ITEM1)
        .with_item(Item("Item Disabled", UserEvents.DISABLED_ITEM1, disabled=True))
        .separator()
        .item("E&xit", UserEvents.EXIT)
    )


class DemoApp:
    """Reacts to tray events on the main thread."""

    def __init__(self, settings: TraySettings) -> None:
        self._events: "queue.Queue[UserEvents]" = queue.Queue()
        self._green = draw_icon("#2e9b4f")
        self._red = draw_icon("#c83737")
        self._tray: TrayIcon = (
            TrayIconBuilder()
            .sender(self._events.put)
            .icon(self._green)
            .title("trayicon demo")
            .tooltip("Cool Tray Icon")
            .on_click(UserEvents.CLICK_TRAY_ICON)
            .on_double_click(UserEvents.DOUBLE_CLICK_TRAY_ICON)
            .on_right_click(UserEvents.RIGHT_CLICK_TRAY_ICON)
            .menu(demo_menu())
            .build(settings=settings)
        )

    def stop(self) -> None:
        self._events.put(UserEvents.EXIT)

    def run(self) -> None:
        with self._tray:
            while True:
                event = self._events.get()
                LOGGER.info("Tray event: %s", event.value)
                if event is UserEvents.EXIT:
                    break
                self.handle(event)

    def handle(self, event: UserEvents) -> None:
        tray = self._tray
        if event is UserEvents.CHECK_ITEM1:
            old_value = tray.get_item_checkable(UserEvents.CHECK_ITEM1)
            if old_value is not None:
                tray.set_item_checkable(UserEvents.CHECK_ITEM1, not old_value)
                tray.set_item_disabled(UserEvents.DISABLED_ITEM1, not old_value)
        elif event is UserEvents.ITEM1:
            tray.set_icon(self._red)
            tray.set_status(TrayIconStatus.NEEDS_ATTENTION)
        elif event is UserEvents.ITEM2:
            tray.set_icon(self._green)
            tray.set_status(TrayIconStatus.ACTIVE)
        elif event is UserEvents.ITEM3:
            tray.set_menu(
                MenuBuilder()
                .item("Another item", UserEvents.ITEM1)
                .item("Exit", UserEvents.EXIT)
            )
        elif event is UserEvents.ITEM4:
            tray.set_tooltip("Menu changed!")


def configure_logging() -> None:
    """Console logging plus an optional rotating log file.

    - Console level can be overridden via TRAYICON_LOG_LEVEL (e.g., DEBUG/INFO).
    - TRAYICON_LOG_FILE enables a DEBUG-level rotating file log.
    """
    level_name = os.getenv("TRAYICON_LOG_LEVEL", "INFO").upper()
    console_level = getattr(logging, level_name, logging.INFO)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    handlers: list = []

    ch = logging.StreamHandler()
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    handlers.append(ch)

    log_file: Optional[str] = os.getenv("TRAYICON_LOG_FILE")
    if log_file:
        from logging.handlers import RotatingFileHandler

        try:
            fh = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=2, encoding="utf-8")
        except OSError:
            LOGGER.warning("Cannot open log file %s; logging to console only", log_file)
        else:
            fh.setLevel(logging.DEBUG)
            fh.setFormatter(fmt)
            handlers.append(fh)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)


def main() -> int:
    """Show the demo tray icon until Exit is chosen."""
    configure_logging()
    settings = TraySettings.load()
    try:
        app = DemoApp(settings)
    except TrayIconError as exc:
        LOGGER.error("Could not create tray icon: %s", exc)
        print(f"trayicon: {exc}", file=sys.stderr)
        return 1

    def handle_signal(signum: int, frame: object) -> None:
        LOGGER.info("Received signal %s, shutting down", signum)
        app.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            signal.signal(sig, handle_signal)
        except ValueError:
            pass

    app.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
