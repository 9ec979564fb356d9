"""Shared state behind the ``org.kde.StatusNotifierItem`` properties."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import List, Optional

from ..icon import Icon, Pixmap
from ..status import TrayIconStatus


@dataclass(frozen=True)
class StatusItemState:
    """Values the host reads through property queries."""

    item_id: str
    menu_path: str
    pixmaps: tuple = ()
    tooltip: str = ""
    title: str = ""
    status: TrayIconStatus = TrayIconStatus.ACTIVE
    item_is_menu: bool = False


class ItemRegistry:
    """Lock-protected status item state.

    Setters replace the whole state value and report whether anything changed;
    getters never wait on anything other than the lock.
    """

    def __init__(
        self,
        item_id: str,
        menu_path: str,
        *,
        icon: Optional[Icon] = None,
        tooltip: str = "",
        title: str = "",
        item_is_menu: bool = False,
    ) -> None:
        self._lock = threading.Lock()
        self._state = StatusItemState(
            item_id=item_id,
            menu_path=menu_path,
            pixmaps=_pixmaps(icon),
            tooltip=tooltip,
            title=title,
            item_is_menu=item_is_menu,
        )

    @property
    def state(self) -> StatusItemState:
        with self._lock:
            return self._state

    def set_icon(self, icon: Optional[Icon]) -> bool:
        return self._update(pixmaps=_pixmaps(icon))

    def set_tooltip(self, tooltip: str) -> bool:
        return self._update(tooltip=tooltip)

    def set_title(self, title: str) -> bool:
        return self._update(title=title)

    def set_status(self, status: TrayIconStatus) -> bool:
        return self._update(status=TrayIconStatus(status))

    def set_menu_path(self, menu_path: str) -> bool:
        return self._update(menu_path=menu_path)

    def icon_pixmap(self) -> List[list]:
        """Return the ``a(iiay)`` value of ``IconPixmap``."""
        return [[width, height, data] for width, height, data in self.state.pixmaps]

    def icon_name(self, fallback: str) -> str:
        """Theme icon name; empty while a pixmap is set so the pixmap wins."""
        return "" if self.state.pixmaps else fallback

    def tooltip_value(self) -> list:
        """Return the ``(sa(iiay)ss)`` value of ``ToolTip``."""
        return ["", [], self.state.tooltip, ""]

    def _update(self, **changes: object) -> bool:
        with self._lock:
            updated = replace(self._state, **changes)
            if updated == self._state:
                return False
            self._state = updated
            return True


def _pixmaps(icon: Optional[Icon]) -> tuple:
    if icon is None:
        return ()
    pixmap: Pixmap = icon.to_pixmap()
    return (pixmap,)
