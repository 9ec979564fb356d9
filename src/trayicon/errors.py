"""Exception types raised by the tray icon package."""

from __future__ import annotations


class TrayIconError(Exception):
    """Base class for tray icon errors."""


class MenuItemNotFoundError(TrayIconError, LookupError):
    """Raised when no menu node matches the requested event identifier."""


class IconLoadingError(TrayIconError):
    """Raised when an icon buffer cannot be decoded."""


class IconMissingError(TrayIconError):
    """Raised by ``build()`` when no icon was configured."""


class SenderMissingError(TrayIconError):
    """Raised by ``build()`` when no event sender was configured."""


class TrayOSError(TrayIconError, OSError):
    """Raised when the bus connection or object registration fails."""


class LayoutNotFoundError(TrayIconError, LookupError):
    """Raised when the host asks for a menu node id that does not exist."""
