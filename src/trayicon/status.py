"""Enumerations describing the tray icon status and lifecycle."""

from __future__ import annotations

from enum import Enum


class TrayIconStatus(str, Enum):
    """Status advertised to the host for the status item."""

    ACTIVE = "Active"
    NEEDS_ATTENTION = "NeedsAttention"
    PASSIVE = "Passive"


class TrayState(str, Enum):
    """Lifecycle states of a single tray presence."""

    UNREGISTERED = "unregistered"
    REGISTERING = "registering"
    REGISTERED = "registered"
    UPDATING = "updating"

    @property
    def live(self) -> bool:
        """Indicate whether the published objects are reachable by the host."""
        return self in (TrayState.REGISTERED, TrayState.UPDATING)
