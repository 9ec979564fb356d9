from __future__ import annotations

import logging
import threading
from typing import Any, List

import pytest

from trayicon.linux.events import (
    ActivationKind,
    EventDispatcher,
    EventRouter,
    IconHandlers,
)
from trayicon.linux.ids import assign
from trayicon.linux.layout import MenuProtocolAdapter
from trayicon.menu import MenuBuilder


def make_router(received: List[Any], handlers: IconHandlers = None) -> tuple:
    adapter = MenuProtocolAdapter()
    adapter.replace(
        *assign(
            MenuBuilder()
            .checkable("A", False, "E1")
            .submenu("S", MenuBuilder().item("B", "E2"))
        )
    )
    dispatcher = EventDispatcher(received.append)
    dispatcher.start()
    return adapter, dispatcher, EventRouter(adapter.resolve, dispatcher, handlers)


def test_clicked_event_delivers_once() -> None:
    received: List[Any] = []
    _, dispatcher, router = make_router(received)
    assert router.on_menu_event(3, "clicked") is True
    dispatcher.stop()
    assert received == ["E2"]


def test_non_click_events_are_ignored() -> None:
    received: List[Any] = []
    _, dispatcher, router = make_router(received)
    assert router.on_menu_event(3, "hovered") is False
    assert router.on_menu_event(3, "opened") is False
    dispatcher.stop()
    assert received == []


def test_stale_and_container_ids_are_dropped(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="trayicon.events")
    received: List[Any] = []
    adapter, dispatcher, router = make_router(received)
    assert router.on_menu_activate(2) is False
    adapter.replace(*assign(MenuBuilder()))
    assert router.on_menu_activate(3) is False
    dispatcher.stop()
    assert received == []
    assert "unresolved menu id 3" in caplog.text


def test_icon_clicks_use_handlers_not_table() -> None:
    received: List[Any] = []
    handlers = IconHandlers(on_click="click", on_right_click="right", on_middle_click="middle")
    _, dispatcher, router = make_router(received, handlers)
    router.on_icon_activate(ActivationKind.PRIMARY, 10, 20)
    router.on_icon_activate(ActivationKind.SECONDARY)
    router.on_icon_activate(ActivationKind.CONTEXT_MENU)
    dispatcher.stop()
    assert received == ["click", "middle", "right"]


def test_unbound_icon_click_and_scroll_are_dropped() -> None:
    received: List[Any] = []
    _, dispatcher, router = make_router(received)
    assert router.on_icon_activate(ActivationKind.PRIMARY) is False
    assert router.on_scroll(120, "vertical") is False
    dispatcher.stop()
    assert received == []


def test_activation_token_keeps_most_recent() -> None:
    _, dispatcher, router = make_router([])
    assert router.activation_token is None
    router.provide_activation_token("first")
    router.provide_activation_token("second")
    assert router.activation_token == "second"
    dispatcher.stop()


def test_sender_failure_is_logged_and_worker_survives(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.ERROR, logger="trayicon.events")
    received: List[Any] = []

    def sender(event: Any) -> None:
        if event == "boom":
            raise RuntimeError("handler exploded")
        received.append(event)

    dispatcher = EventDispatcher(sender)
    dispatcher.start()
    dispatcher.put(1, "boom")
    dispatcher.put(2, "ok")
    dispatcher.stop()
    assert received == ["ok"]
    assert "Event sender failed" in caplog.text


def test_sender_runs_on_worker_thread() -> None:
    threads: List[str] = []
    dispatcher = EventDispatcher(lambda event: threads.append(threading.current_thread().name))
    dispatcher.start()
    dispatcher.put(1, "x")
    dispatcher.stop()
    assert threads == ["trayicon-events"]
    assert not dispatcher.running


def test_dispatcher_can_stop_from_its_own_sender() -> None:
    received: List[Any] = []
    holder = {}

    def sender(event: Any) -> None:
        received.append(event)
        holder["dispatcher"].stop()

    dispatcher = EventDispatcher(sender)
    holder["dispatcher"] = dispatcher
    dispatcher.start()
    thread = dispatcher._thread
    dispatcher.put(1, "exit")
    thread.join(timeout=2.0)
    assert received == ["exit"]
    assert not thread.is_alive()
