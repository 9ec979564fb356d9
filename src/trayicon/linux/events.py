"""Routing of host activations to application events.

The bus dispatch context only ever puts ``(wire_id, event)`` pairs on a queue.
A dedicated worker thread drains the queue and invokes the application's
sender, so slow handlers never stall protocol traffic.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from .ids import ROOT_ID

LOGGER = logging.getLogger("trayicon.events")

_STOP = object()


class ActivationKind(str, Enum):
    """Kinds of activation the host reports for the icon itself."""

    PRIMARY = "primary-activate"
    SECONDARY = "secondary-activate"
    CONTEXT_MENU = "context-menu"
    SCROLL = "scroll"


@dataclass(frozen=True)
class IconHandlers:
    """Application events bound to clicks on the icon itself."""

    on_click: Any = None
    on_double_click: Any = None
    on_right_click: Any = None
    on_middle_click: Any = None

    def event_for(self, kind: ActivationKind) -> Any:
        if kind is ActivationKind.PRIMARY:
            return self.on_click
        if kind is ActivationKind.SECONDARY:
            return self.on_middle_click
        if kind is ActivationKind.CONTEXT_MENU:
            return self.on_right_click
        return None


class EventDispatcher:
    """Worker thread delivering queued events to the application sender."""

    def __init__(self, sender: Callable[[Any], None], *, name: str = "trayicon-events") -> None:
        self._sender = sender
        self._queue: "queue.SimpleQueue[Any]" = queue.SimpleQueue()
        self._thread: Optional[threading.Thread] = None
        self._name = name
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.running:
                return
            self._thread = threading.Thread(target=self._drain, name=self._name, daemon=True)
            self._thread.start()

    def stop(self, timeout: Optional[float] = 2.0) -> None:
        """Deliver everything already queued, then stop the worker."""
        with self._lock:
            thread = self._thread
            self._thread = None
        if thread is None:
            return
        self._queue.put(_STOP)
        if thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def put(self, wire_id: int, event: Any) -> None:
        """Queue an event; safe to call from any thread."""
        self._queue.put((wire_id, event))

    def _drain(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            wire_id, event = item
            try:
                self._sender(event)
            except Exception:
                LOGGER.exception("Event sender failed for %r (id=%d)", event, wire_id)


class EventRouter:
    """Turns wire-level activations into application events.

    Args:
        resolve: Maps a wire id to the application event identifier of the
            currently served tree, ``None`` when unknown.
        dispatcher: Queue endpoint events are delivered to.
        handlers: Events bound to clicks on the icon itself.
    """

    def __init__(
        self,
        resolve: Callable[[int], Optional[Any]],
        dispatcher: EventDispatcher,
        handlers: Optional[IconHandlers] = None,
    ) -> None:
        self._resolve = resolve
        self._dispatcher = dispatcher
        self._handlers = handlers or IconHandlers()
        self._token_lock = threading.Lock()
        self._activation_token: Optional[str] = None

    @property
    def handlers(self) -> IconHandlers:
        return self._handlers

    def on_menu_event(self, wire_id: int, event_type: str) -> bool:
        """Handle a dbusmenu ``Event``; only ``clicked`` activates an item.

        Returns:
            True when an application event was queued.
        """
        if event_type != "clicked":
            LOGGER.debug("Ignoring menu event %r for id %d", event_type, wire_id)
            return False
        return self.on_menu_activate(wire_id)

    def on_menu_activate(self, wire_id: int) -> bool:
        """Deliver the event bound to ``wire_id``.

        Stale ids and containers without an identifier are dropped: the host
        may still be clicking on a tree that has just been replaced.
        """
        event = self._resolve(wire_id)
        if event is None:
            LOGGER.debug("Dropping activation for unresolved menu id %d", wire_id)
            return False
        self._dispatcher.put(wire_id, event)
        return True

    def on_icon_activate(self, kind: ActivationKind, x: int = 0, y: int = 0) -> bool:
        """Deliver the event bound to a click on the icon itself."""
        event = self._handlers.event_for(kind)
        if event is None:
            LOGGER.debug("No handler bound for %s at (%d, %d)", kind.value, x, y)
            return False
        self._dispatcher.put(ROOT_ID, event)
        return True

    def on_scroll(self, delta: int, orientation: str) -> bool:
        LOGGER.debug("Scroll %d (%s) ignored", delta, orientation)
        return self.on_icon_activate(ActivationKind.SCROLL)

    def provide_activation_token(self, token: str) -> None:
        """Remember the most recent XDG activation token."""
        with self._token_lock:
            self._activation_token = token

    @property
    def activation_token(self) -> Optional[str]:
        with self._token_lock:
            return self._activation_token
