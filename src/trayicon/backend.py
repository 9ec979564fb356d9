"""Platform selection for the tray icon implementation."""

from __future__ import annotations

import sys
from typing import Any, Optional, Protocol

from .errors import TrayOSError
from .icon import Icon
from .menu import MenuBuilder
from .status import TrayIconStatus, TrayState


class TrayIconBackend(Protocol):
    """Operations a platform tray implementation provides to the facade."""

    @property
    def state(self) -> TrayState: ...

    def set_icon(self, icon: Icon) -> None: ...

    def set_menu(self, menu: MenuBuilder) -> None: ...

    def set_tooltip(self, tooltip: str) -> None: ...

    def set_title(self, title: str) -> None: ...

    def set_status(self, status: TrayIconStatus) -> None: ...

    def set_item_checkable(self, event_id: Any, checked: bool) -> None: ...

    def set_item_disabled(self, event_id: Any, disabled: bool) -> None: ...

    def show_menu(self) -> None: ...

    def get_xdg_activation_token(self) -> Optional[str]: ...

    def close(self) -> None: ...


def is_supported(platform: Optional[str] = None) -> bool:
    """Return True when a backend exists for ``platform``."""
    platform = platform or sys.platform
    return platform.startswith(("linux", "freebsd", "openbsd", "netbsd", "dragonfly"))


def create_backend(*, platform: Optional[str] = None, **options: Any) -> TrayIconBackend:
    """Create and register the backend for the running platform.

    Raises:
        TrayOSError: If the platform has no backend or registration fails.
    """
    platform = platform or sys.platform
    if not is_supported(platform):
        raise TrayOSError(f"No tray icon backend for platform {platform!r}")

    from .linux import LinuxTrayIcon

    backend = LinuxTrayIcon(**options)
    backend.register()
    return backend
