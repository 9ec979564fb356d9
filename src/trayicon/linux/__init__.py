"""StatusNotifierItem and dbusmenu implementation over D-Bus."""

from .connection import BusConnection, shared_connection
from .events import ActivationKind, EventDispatcher, EventRouter, IconHandlers
from .ids import ROOT_ID, AnnotatedNode, IdAssigner, assign
from .layout import MenuProtocolAdapter, MenuSnapshot
from .registry import ItemRegistry
from .tray import LinuxTrayIcon

__all__ = [
    "ROOT_ID",
    "ActivationKind",
    "AnnotatedNode",
    "BusConnection",
    "EventDispatcher",
    "EventRouter",
    "IconHandlers",
    "IdAssigner",
    "ItemRegistry",
    "LinuxTrayIcon",
    "MenuProtocolAdapter",
    "MenuSnapshot",
    "assign",
    "shared_connection",
]
