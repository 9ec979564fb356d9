"""Tray icons with menus for desktop applications."""

from .builder import TrayIconBuilder
from .errors import (
    IconLoadingError,
    IconMissingError,
    LayoutNotFoundError,
    MenuItemNotFoundError,
    SenderMissingError,
    TrayIconError,
    TrayOSError,
)
from .icon import Icon
from .menu import Checkable, Item, MenuBuilder, Separator, Submenu
from .settings import TraySettings
from .status import TrayIconStatus, TrayState
from .trayicon import TrayIcon

__all__ = [
    "Checkable",
    "Icon",
    "IconLoadingError",
    "IconMissingError",
    "Item",
    "LayoutNotFoundError",
    "MenuBuilder",
    "MenuItemNotFoundError",
    "SenderMissingError",
    "Separator",
    "Submenu",
    "TrayIcon",
    "TrayIconBuilder",
    "TrayIconError",
    "TrayIconStatus",
    "TrayOSError",
    "TraySettings",
    "TrayState",
]
