"""StatusNotifierItem + dbusmenu tray icon backend."""

from __future__ import annotations

import contextlib
import itertools
import logging
import os
import threading
from typing import Any, Callable, Iterator, Optional, Tuple

from dbus_fast import Message, MessageType
from dbus_fast.constants import RequestNameReply
from dbus_fast.errors import DBusError

from ..errors import TrayOSError
from ..icon import Icon
from ..menu import MenuBuilder
from ..settings import TraySettings
from ..status import TrayIconStatus, TrayState
from .connection import BusConnection, shared_connection
from .events import EventDispatcher, EventRouter, IconHandlers
from .ids import ROOT_ID, AnnotatedNode, IdAssigner, IdTable
from .layout import MenuProtocolAdapter, node_properties, to_variants
from .registry import ItemRegistry
from .services import DbusMenuInterface, StatusNotifierItemInterface

LOGGER = logging.getLogger("trayicon.linux")

_instance_counter = itertools.count(1)


def unique_bus_name(prefix: str) -> str:
    """Return a well-known name unique to this process and icon."""
    return f"{prefix}-{os.getpid()}-{next(_instance_counter)}"


class LinuxTrayIcon:
    """Publishes one status item and its menu on the message bus.

    Registration is performed once by :meth:`register`; every later update
    only swaps shared state and emits the matching change signal on the bus
    thread.
    """

    def __init__(
        self,
        *,
        sender: Callable[[Any], None],
        icon: Optional[Icon],
        menu: Optional[MenuBuilder] = None,
        tooltip: str = "",
        title: str = "",
        handlers: Optional[IconHandlers] = None,
        item_is_menu: bool = False,
        settings: Optional[TraySettings] = None,
        connection: Optional[BusConnection] = None,
    ) -> None:
        self._settings = settings or TraySettings()
        self._connection = connection
        self._bus_name = unique_bus_name(self._settings.name_prefix)
        self._assigner = IdAssigner()
        self._adapter = MenuProtocolAdapter()
        self._dispatcher = EventDispatcher(sender)
        self._router = EventRouter(self._adapter.resolve, self._dispatcher, handlers)
        self._registry = ItemRegistry(
            self._bus_name,
            self._settings.menu_path,
            icon=icon,
            tooltip=tooltip,
            title=title,
            item_is_menu=item_is_menu,
        )
        self._item_interface = StatusNotifierItemInterface(
            self._registry, self._router, self._settings
        )
        self._menu_interface: Optional[DbusMenuInterface] = None
        self._initial_menu = menu
        self._state = TrayState.UNREGISTERED
        self._state_lock = threading.Lock()
        self._watcher_registered = False
        self._name_owned = False
        self._item_exported = False

    @property
    def bus_name(self) -> str:
        return self._bus_name

    @property
    def state(self) -> TrayState:
        return self._state

    @property
    def adapter(self) -> MenuProtocolAdapter:
        return self._adapter

    @property
    def registry(self) -> ItemRegistry:
        return self._registry

    @property
    def router(self) -> EventRouter:
        return self._router

    @property
    def watcher_registered(self) -> bool:
        return self._watcher_registered

    def register(self) -> None:
        """Connect, publish both objects and announce the item.

        Raises:
            TrayOSError: If the bus connection or object export fails.
        """
        with self._state_lock:
            if self._state is not TrayState.UNREGISTERED:
                return
            self._state = TrayState.REGISTERING
        try:
            if self._connection is None:
                self._connection = shared_connection(self._settings.bus_address)
            self._connection.claim_path(self._settings.item_path, self)
            self._connection.claim_path(self._settings.menu_path, self)
            self._dispatcher.start()
            items = self._initial_menu.items if self._initial_menu is not None else ()
            roots, table = self._assigner.assign(items)
            self._connection.run(self._publish(roots, table))
        except TrayOSError:
            self._abort_registration()
            raise
        except (DBusError, OSError, ValueError) as exc:
            self._abort_registration()
            raise TrayOSError(f"Failed to register tray icon: {exc}") from exc
        with self._state_lock:
            self._state = TrayState.REGISTERED
        LOGGER.info("Tray icon registered as %s", self._bus_name)

    def set_icon(self, icon: Icon) -> None:
        with self._updating():
            if self._registry.set_icon(icon):
                self._dispatch(self._item_interface.new_icon)

    def set_tooltip(self, tooltip: str) -> None:
        with self._updating():
            if self._registry.set_tooltip(tooltip):
                self._dispatch(self._item_interface.new_tool_tip)

    def set_title(self, title: str) -> None:
        with self._updating():
            if self._registry.set_title(title):
                self._dispatch(self._item_interface.new_title)

    def set_status(self, status: TrayIconStatus) -> None:
        with self._updating():
            if self._registry.set_status(status):
                self._dispatch(self._item_interface.new_status, TrayIconStatus(status).value)

    def set_menu(self, menu: MenuBuilder) -> None:
        """Replace the whole served menu with a freshly numbered tree."""
        with self._updating():
            roots, table = self._assigner.assign(menu.items)
            self._dispatch(self._install_menu, roots, table)

    def set_item_checkable(self, event_id: Any, checked: bool) -> None:
        with self._updating():
            self._dispatch(self._apply_mutation, self._adapter.set_checked, event_id, checked)

    def set_item_disabled(self, event_id: Any, disabled: bool) -> None:
        with self._updating():
            self._dispatch(self._apply_mutation, self._adapter.set_disabled, event_id, disabled)

    def show_menu(self) -> None:
        # The host opens the menu itself; there is no request to make it do so.
        LOGGER.debug("show_menu is handled by the status notifier host")

    def get_xdg_activation_token(self) -> Optional[str]:
        return self._router.activation_token

    def close(self) -> None:
        """Withdraw the item from the bus and stop event delivery."""
        with self._state_lock:
            if self._state is TrayState.UNREGISTERED:
                return
            self._state = TrayState.UNREGISTERED
        try:
            if self._connection is not None:
                self._connection.run(self._unpublish())
        except (DBusError, OSError, RuntimeError):
            LOGGER.debug("Tray icon teardown failed", exc_info=True)
        finally:
            self._dispatcher.stop()
            if self._connection is not None:
                self._connection.release_paths(self)
        LOGGER.info("Tray icon %s unregistered", self._bus_name)

    async def _publish(self, roots: Tuple[AnnotatedNode, ...], table: IdTable) -> None:
        bus = self._connection.bus
        reply = await bus.request_name(self._bus_name)
        self._name_owned = True
        if reply is not RequestNameReply.PRIMARY_OWNER:
            LOGGER.warning("Bus name %s not owned (%s)", self._bus_name, reply)
        bus.export(self._settings.item_path, self._item_interface)
        self._item_exported = True
        self._install_menu(roots, table)
        self._watcher_registered = await self._register_with_watcher()
        # NewIcon only once both objects are exported.
        self._item_interface.new_icon()

    async def _unpublish(self) -> None:
        bus = self._connection.bus
        if self._menu_interface is not None:
            bus.unexport(self._settings.menu_path, self._menu_interface)
            self._menu_interface = None
        if self._item_exported:
            bus.unexport(self._settings.item_path, self._item_interface)
            self._item_exported = False
        if self._name_owned:
            self._name_owned = False
            await bus.release_name(self._bus_name)

    async def _register_with_watcher(self) -> bool:
        """Ask the watcher to track the item; a missing host is not an error."""
        message = Message(
            destination=self._settings.watcher_name,
            path=self._settings.watcher_path,
            interface=self._settings.watcher_name,
            member="RegisterStatusNotifierItem",
            signature="s",
            body=[self._bus_name],
        )
        try:
            reply = await self._connection.bus.call(message)
        except (DBusError, OSError) as exc:
            LOGGER.warning("StatusNotifierWatcher call failed: %s", exc)
            return False
        if reply is None or reply.message_type is MessageType.ERROR:
            error = reply.error_name if reply is not None else "no reply"
            LOGGER.warning(
                "StatusNotifierWatcher unavailable (%s); item stays queryable", error
            )
            return False
        LOGGER.info("Registered %s with %s", self._bus_name, self._settings.watcher_name)
        return True

    def _install_menu(self, roots: Tuple[AnnotatedNode, ...], table: IdTable) -> None:
        """Swap the served tree; runs on the bus thread.

        Removal of the old object, the tree swap and export of the new object
        happen in one loop callback, so no query can observe a half-registered
        menu.
        """
        bus = self._connection.bus
        if self._menu_interface is not None:
            bus.unexport(self._settings.menu_path, self._menu_interface)
        revision = self._adapter.replace(roots, table)
        interface = DbusMenuInterface(self._adapter, self._router, self._settings)
        bus.export(self._settings.menu_path, interface)
        self._menu_interface = interface
        interface.layout_updated(revision, ROOT_ID)

    def _apply_mutation(
        self,
        mutate: Callable[[Any, bool], Tuple[int, AnnotatedNode, int]],
        event_id: Any,
        value: bool,
    ) -> None:
        revision, node, parent_id = mutate(event_id, value)
        if self._menu_interface is None:
            return
        props = to_variants(node_properties(node))
        self._menu_interface.items_properties_updated([[node.wire_id, props]], [])
        self._menu_interface.layout_updated(revision, parent_id)

    def _dispatch(self, fn: Callable[..., Any], *args: Any) -> None:
        self._connection.submit(fn, *args)

    def _abort_registration(self) -> None:
        """Undo whatever part of the registration already happened."""
        connection = self._connection
        if connection is not None:
            if self._name_owned or self._item_exported or self._menu_interface is not None:
                try:
                    connection.run(self._unpublish())
                except (DBusError, OSError, RuntimeError):
                    LOGGER.debug("Partial registration cleanup failed", exc_info=True)
            connection.release_paths(self)
        self._dispatcher.stop()
        with self._state_lock:
            self._state = TrayState.UNREGISTERED

    @contextlib.contextmanager
    def _updating(self) -> Iterator[None]:
        with self._state_lock:
            if not self._state.live:
                raise TrayOSError(f"Tray icon is {self._state.value}")
            self._state = TrayState.UPDATING
        try:
            yield
        finally:
            with self._state_lock:
                if self._state is TrayState.UPDATING:
                    self._state = TrayState.REGISTERED
