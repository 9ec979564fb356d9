"""Application-facing tray icon handle."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from .backend import TrayIconBackend
from .errors import MenuItemNotFoundError
from .icon import Icon
from .menu import MenuBuilder
from .status import TrayIconStatus, TrayState

LOGGER = logging.getLogger("trayicon")


class TrayIcon:
    """A registered tray icon.

    Keeps the application's view of the icon, tooltip, title, status and menu
    so redundant updates are skipped and checkable state can be read back
    without a round trip to the host. Use as a context manager, or call
    :meth:`close`, to withdraw the icon.
    """

    def __init__(
        self,
        backend: TrayIconBackend,
        *,
        icon: Optional[Icon] = None,
        menu: Optional[MenuBuilder] = None,
        tooltip: str = "",
        title: str = "",
        status: TrayIconStatus = TrayIconStatus.ACTIVE,
    ) -> None:
        self._backend = backend
        self._lock = threading.RLock()
        self._icon = icon
        self._menu = menu
        self._tooltip = tooltip
        self._title = title
        self._status = status

    def __enter__(self) -> "TrayIcon":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def state(self) -> TrayState:
        return self._backend.state

    @property
    def backend(self) -> TrayIconBackend:
        return self._backend

    @property
    def menu(self) -> Optional[MenuBuilder]:
        with self._lock:
            return self._menu.copy() if self._menu is not None else None

    def set_icon(self, icon: Icon) -> None:
        with self._lock:
            if icon == self._icon:
                return
            self._backend.set_icon(icon)
            self._icon = icon

    def set_menu(self, menu: MenuBuilder) -> None:
        """Replace the whole menu; an equal menu is ignored."""
        with self._lock:
            if menu == self._menu:
                LOGGER.debug("Menu unchanged; skipping update")
                return
            menu = menu.copy()
            self._backend.set_menu(menu)
            self._menu = menu

    def set_tooltip(self, tooltip: str) -> None:
        with self._lock:
            if tooltip == self._tooltip:
                return
            self._backend.set_tooltip(tooltip)
            self._tooltip = tooltip

    def set_title(self, title: str) -> None:
        with self._lock:
            if title == self._title:
                return
            self._backend.set_title(title)
            self._title = title

    def set_status(self, status: TrayIconStatus) -> None:
        status = TrayIconStatus(status)
        with self._lock:
            if status is self._status:
                return
            self._backend.set_status(status)
            self._status = status

    def get_item_checkable(self, event_id: Any) -> Optional[bool]:
        """Checked state of the first menu node with ``event_id``, if checkable."""
        with self._lock:
            if self._menu is None:
                return None
            return self._menu.get_checkable(event_id)

    def set_item_checkable(self, event_id: Any, checked: bool) -> None:
        """Raises :class:`MenuItemNotFoundError` when no checkable matches."""
        with self._lock:
            menu = self._require_menu(event_id).copy()
            menu.set_checkable(event_id, checked)
            self._backend.set_item_checkable(event_id, checked)
            self._menu = menu

    def set_item_disabled(self, event_id: Any, disabled: bool) -> None:
        """Raises :class:`MenuItemNotFoundError` when no item matches."""
        with self._lock:
            menu = self._require_menu(event_id).copy()
            menu.set_disabled(event_id, disabled)
            self._backend.set_item_disabled(event_id, disabled)
            self._menu = menu

    def show_menu(self) -> None:
        self._backend.show_menu()

    def get_xdg_activation_token(self) -> Optional[str]:
        return self._backend.get_xdg_activation_token()

    def close(self) -> None:
        self._backend.close()

    def _require_menu(self, event_id: Any) -> MenuBuilder:
        if self._menu is None:
            raise MenuItemNotFoundError(f"No menu item for {event_id!r}")
        return self._menu
