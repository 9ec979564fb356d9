"""Shared fixtures: an in-process stand-in for the D-Bus connection."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Tuple

import pytest
from dbus_fast import MessageType
from dbus_fast.constants import RequestNameReply
from PIL import Image

from trayicon.icon import Icon
from trayicon.linux.connection import BusConnection


class FakeBus:
    """Records exports and calls instead of talking to a bus daemon."""

    def __init__(self) -> None:
        self.exported: Dict[str, Any] = {}
        self.unexported: List[Tuple[str, Any]] = []
        self.requested: List[str] = []
        self.released: List[str] = []
        self.calls: List[Any] = []
        self.watcher_reply = MessageType.METHOD_RETURN
        self.events: List[str] = []

    async def request_name(self, name: str) -> RequestNameReply:
        self.requested.append(name)
        self.events.append("request_name")
        return RequestNameReply.PRIMARY_OWNER

    async def release_name(self, name: str) -> None:
        self.released.append(name)

    async def call(self, message: Any) -> SimpleNamespace:
        self.calls.append(message)
        self.events.append(f"call:{message.member}")
        return SimpleNamespace(
            message_type=self.watcher_reply,
            error_name="org.freedesktop.DBus.Error.ServiceUnknown",
        )

    def export(self, path: str, interface: Any) -> None:
        self.exported[path] = interface
        self.events.append(f"export:{path}")

    def unexport(self, path: str, interface: Any = None) -> None:
        self.unexported.append((path, interface))
        if self.exported.get(path) is interface:
            del self.exported[path]


class FakeConnection(BusConnection):
    """Runs work inline; records the name of every submitted callable."""

    def __init__(self) -> None:
        super().__init__()
        self.fake_bus = FakeBus()
        self.submitted: List[str] = []

    @property
    def bus(self) -> FakeBus:
        return self.fake_bus

    def run(self, coro: Any, timeout: Any = None) -> Any:
        return asyncio.run(coro)

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        self.submitted.append(getattr(fn, "__name__", repr(fn)))
        fn(*args)


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


def solid_icon(color: Tuple[int, int, int, int], size: int = 4) -> Icon:
    return Icon.from_image(Image.new("RGBA", (size, size), color))


@pytest.fixture
def red_icon() -> Icon:
    return solid_icon((255, 0, 0, 255))


@pytest.fixture
def green_icon() -> Icon:
    return solid_icon((0, 255, 0, 255))
