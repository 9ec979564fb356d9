"""D-Bus objects published for the status item and its menu.

Both interfaces are thin: they translate wire calls into calls on the
lock-protected core objects and map lookup failures to ``InvalidArgs``.
"""

# dbus-fast reads signatures from the annotations at class creation, so this
# module must not use postponed evaluation of annotations.

import logging

from dbus_fast import PropertyAccess
from dbus_fast.constants import ErrorType
from dbus_fast.errors import DBusError
from dbus_fast.service import ServiceInterface, dbus_property, method, signal

from ..errors import LayoutNotFoundError
from ..settings import TraySettings
from .events import ActivationKind, EventRouter
from .layout import MenuProtocolAdapter
from .registry import ItemRegistry

LOGGER = logging.getLogger("trayicon.dbus")

DBUSMENU_INTERFACE = "com.canonical.dbusmenu"
STATUS_NOTIFIER_ITEM_INTERFACE = "org.kde.StatusNotifierItem"
DBUSMENU_VERSION = 3


class DbusMenuInterface(ServiceInterface):
    """``com.canonical.dbusmenu`` backed by a :class:`MenuProtocolAdapter`."""

    def __init__(
        self,
        adapter: MenuProtocolAdapter,
        router: EventRouter,
        settings: TraySettings,
    ) -> None:
        super().__init__(DBUSMENU_INTERFACE)
        self._adapter = adapter
        self._router = router
        self._text_direction = settings.text_direction

    @method(name="GetLayout")
    def get_layout(
        self, parent_id: "i", recursion_depth: "i", property_names: "as"
    ) -> "u(ia{sv}av)":
        try:
            revision, layout = self._adapter.get_layout(
                parent_id, recursion_depth, property_names
            )
        except LayoutNotFoundError as exc:
            LOGGER.debug("GetLayout for unknown id %d", parent_id)
            raise DBusError(ErrorType.INVALID_ARGS, str(exc)) from exc
        return [revision, layout]

    @method(name="GetGroupProperties")
    def get_group_properties(self, ids: "ai", property_names: "as") -> "a(ia{sv})":
        return self._adapter.group_properties(ids, property_names)

    @method(name="GetProperty")
    def get_property(self, item_id: "i", property_name: "s") -> "v":
        try:
            return self._adapter.property_of(item_id, property_name)
        except LayoutNotFoundError as exc:
            raise DBusError(ErrorType.INVALID_ARGS, str(exc)) from exc

    @method(name="Event")
    def event(self, item_id: "i", event_id: "s", data: "v", timestamp: "u"):
        self._router.on_menu_event(item_id, event_id)

    @method(name="EventGroup")
    def event_group(self, events: "a(isvu)") -> "ai":
        not_found = []
        for item_id, event_id, _data, _timestamp in events:
            if not self._adapter.contains(item_id):
                LOGGER.debug("EventGroup entry for unknown id %d", item_id)
                not_found.append(item_id)
                continue
            self._router.on_menu_event(item_id, event_id)
        return not_found

    @method(name="AboutToShow")
    def about_to_show(self, item_id: "i") -> "b":
        return False

    @method(name="AboutToShowGroup")
    def about_to_show_group(self, ids: "ai") -> "aiai":
        return [[], [item_id for item_id in ids if not self._adapter.contains(item_id)]]

    @dbus_property(access=PropertyAccess.READ, name="Version")
    def version(self) -> "u":
        return DBUSMENU_VERSION

    @dbus_property(access=PropertyAccess.READ, name="TextDirection")
    def text_direction(self) -> "s":
        return self._text_direction

    @dbus_property(access=PropertyAccess.READ, name="Status")
    def status(self) -> "s":
        return "normal"

    @dbus_property(access=PropertyAccess.READ, name="IconThemePath")
    def icon_theme_path(self) -> "as":
        return []

    @signal(name="LayoutUpdated")
    def layout_updated(self, revision, parent_id) -> "ui":
        return [revision, parent_id]

    @signal(name="ItemsPropertiesUpdated")
    def items_properties_updated(self, updated, removed) -> "a(ia{sv})a(ias)":
        return [updated, removed]


class StatusNotifierItemInterface(ServiceInterface):
    """``org.kde.StatusNotifierItem`` backed by an :class:`ItemRegistry`."""

    def __init__(
        self,
        registry: ItemRegistry,
        router: EventRouter,
        settings: TraySettings,
    ) -> None:
        super().__init__(STATUS_NOTIFIER_ITEM_INTERFACE)
        self._registry = registry
        self._router = router
        self._category = settings.category
        self._fallback_icon_name = settings.fallback_icon_name

    @method(name="Activate")
    def activate(self, x: "i", y: "i"):
        self._router.on_icon_activate(ActivationKind.PRIMARY, x, y)

    @method(name="SecondaryActivate")
    def secondary_activate(self, x: "i", y: "i"):
        self._router.on_icon_activate(ActivationKind.SECONDARY, x, y)

    @method(name="ContextMenu")
    def context_menu(self, x: "i", y: "i"):
        self._router.on_icon_activate(ActivationKind.CONTEXT_MENU, x, y)

    @method(name="Scroll")
    def scroll(self, delta: "i", orientation: "s"):
        self._router.on_scroll(delta, orientation)

    @method(name="ProvideXdgActivationToken")
    def provide_xdg_activation_token(self, token: "s"):
        self._router.provide_activation_token(token)

    @dbus_property(access=PropertyAccess.READ, name="Category")
    def category(self) -> "s":
        return self._category

    @dbus_property(access=PropertyAccess.READ, name="Id")
    def item_id(self) -> "s":
        return self._registry.state.item_id

    @dbus_property(access=PropertyAccess.READ, name="Title")
    def title(self) -> "s":
        return self._registry.state.title

    @dbus_property(access=PropertyAccess.READ, name="Status")
    def status(self) -> "s":
        return self._registry.state.status.value

    @dbus_property(access=PropertyAccess.READ, name="WindowId")
    def window_id(self) -> "i":
        return 0

    @dbus_property(access=PropertyAccess.READ, name="IconThemePath")
    def icon_theme_path(self) -> "s":
        return ""

    @dbus_property(access=PropertyAccess.READ, name="Menu")
    def menu(self) -> "o":
        return self._registry.state.menu_path

    @dbus_property(access=PropertyAccess.READ, name="ItemIsMenu")
    def item_is_menu(self) -> "b":
        return self._registry.state.item_is_menu

    @dbus_property(access=PropertyAccess.READ, name="IconName")
    def icon_name(self) -> "s":
        return self._registry.icon_name(self._fallback_icon_name)

    @dbus_property(access=PropertyAccess.READ, name="IconPixmap")
    def icon_pixmap(self) -> "a(iiay)":
        return self._registry.icon_pixmap()

    @dbus_property(access=PropertyAccess.READ, name="OverlayIconName")
    def overlay_icon_name(self) -> "s":
        return ""

    @dbus_property(access=PropertyAccess.READ, name="OverlayIconPixmap")
    def overlay_icon_pixmap(self) -> "a(iiay)":
        return []

    @dbus_property(access=PropertyAccess.READ, name="AttentionIconName")
    def attention_icon_name(self) -> "s":
        return ""

    @dbus_property(access=PropertyAccess.READ, name="AttentionIconPixmap")
    def attention_icon_pixmap(self) -> "a(iiay)":
        return []

    @dbus_property(access=PropertyAccess.READ, name="AttentionMovieName")
    def attention_movie_name(self) -> "s":
        return ""

    @dbus_property(access=PropertyAccess.READ, name="ToolTip")
    def tool_tip(self) -> "(sa(iiay)ss)":
        return self._registry.tooltip_value()

    @signal(name="NewTitle")
    def new_title(self):
        pass

    @signal(name="NewIcon")
    def new_icon(self):
        pass

    @signal(name="NewAttentionIcon")
    def new_attention_icon(self):
        pass

    @signal(name="NewOverlayIcon")
    def new_overlay_icon(self):
        pass

    @signal(name="NewMenu")
    def new_menu(self):
        pass

    @signal(name="NewToolTip")
    def new_tool_tip(self):
        pass

    @signal(name="NewStatus")
    def new_status(self, status) -> "s":
        return status
