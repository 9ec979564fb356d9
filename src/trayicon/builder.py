"""Fluent construction of a :class:`~trayicon.trayicon.TrayIcon`."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .backend import create_backend
from .errors import IconLoadingError, IconMissingError, SenderMissingError
from .icon import Icon
from .linux.events import IconHandlers
from .menu import MenuBuilder
from .settings import TraySettings
from .trayicon import TrayIcon

LOGGER = logging.getLogger("trayicon.builder")


class TrayIconBuilder:
    """Collects tray icon options; :meth:`build` registers the icon.

    Example::

        tray = (
            TrayIconBuilder()
            .sender(events.put)
            .icon_from_buffer(png_bytes)
            .tooltip("My app")
            .on_click(Events.CLICK)
            .menu(MenuBuilder().item("Exit", Events.EXIT))
            .build()
        )
    """

    def __init__(self) -> None:
        self._sender: Optional[Callable[[Any], None]] = None
        self._icon: Optional[Icon] = None
        self._icon_error: Optional[IconLoadingError] = None
        self._menu: Optional[MenuBuilder] = None
        self._title = ""
        self._tooltip = ""
        self._on_click: Any = None
        self._on_double_click: Any = None
        self._on_right_click: Any = None
        self._on_middle_click: Any = None
        self._item_is_menu = False

    def sender(self, fn: Callable[[Any], None]) -> "TrayIconBuilder":
        """Callable receiving every application event, on a worker thread."""
        self._sender = fn
        return self

    def icon(self, icon: Icon) -> "TrayIconBuilder":
        self._icon = icon
        self._icon_error = None
        return self

    def icon_from_buffer(
        self, data: bytes, width: Optional[int] = None, height: Optional[int] = None
    ) -> "TrayIconBuilder":
        """Decode ``data`` now; a decode failure is raised by :meth:`build`."""
        try:
            self._icon = Icon.from_buffer(data, width, height)
            self._icon_error = None
        except IconLoadingError as exc:
            LOGGER.debug("Deferring icon decode failure: %s", exc)
            self._icon = None
            self._icon_error = exc
        return self

    def title(self, title: str) -> "TrayIconBuilder":
        self._title = title
        return self

    def tooltip(self, tooltip: str) -> "TrayIconBuilder":
        self._tooltip = tooltip
        return self

    def on_click(self, event: Any) -> "TrayIconBuilder":
        self._on_click = event
        return self

    def on_double_click(self, event: Any) -> "TrayIconBuilder":
        self._on_double_click = event
        return self

    def on_right_click(self, event: Any) -> "TrayIconBuilder":
        self._on_right_click = event
        return self

    def on_middle_click(self, event: Any) -> "TrayIconBuilder":
        self._on_middle_click = event
        return self

    def menu(self, menu: MenuBuilder) -> "TrayIconBuilder":
        self._menu = menu
        return self

    def item_is_menu(self, value: bool = True) -> "TrayIconBuilder":
        """Ask the host to open the menu on primary click."""
        self._item_is_menu = value
        return self

    def when(self, fn: Callable[["TrayIconBuilder"], "TrayIconBuilder"]) -> "TrayIconBuilder":
        return fn(self)

    def build(
        self,
        *,
        settings: Optional[TraySettings] = None,
        connection: Any = None,
        platform: Optional[str] = None,
    ) -> TrayIcon:
        """Register the tray icon and return its facade.

        Raises:
            IconLoadingError: If :meth:`icon_from_buffer` could not decode.
            IconMissingError: If no icon was supplied.
            SenderMissingError: If no sender was supplied.
            TrayOSError: If the platform tray cannot be reached.
        """
        if self._icon_error is not None:
            raise self._icon_error
        if self._icon is None:
            raise IconMissingError("Tray icon requires an icon")
        if self._sender is None:
            raise SenderMissingError("Tray icon requires an event sender")

        menu = self._menu.copy() if self._menu is not None else None
        handlers = IconHandlers(
            on_click=self._on_click,
            on_double_click=self._on_double_click,
            on_right_click=self._on_right_click,
            on_middle_click=self._on_middle_click,
        )
        backend = create_backend(
            platform=platform,
            sender=self._sender,
            icon=self._icon,
            menu=menu,
            tooltip=self._tooltip,
            title=self._title,
            handlers=handlers,
            item_is_menu=self._item_is_menu,
            settings=settings,
            connection=connection,
        )
        return TrayIcon(
            backend,
            icon=self._icon,
            menu=menu,
            tooltip=self._tooltip,
            title=self._title,
        )
