"""Long-lived D-Bus connection running on its own event loop thread."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from dbus_fast import BusType
from dbus_fast.aio import MessageBus
from dbus_fast.errors import AuthError, DBusError, InvalidAddressError

from ..errors import TrayOSError

LOGGER = logging.getLogger("trayicon.dbus")

T = TypeVar("T")


class BusConnection:
    """A message bus connection served by a dedicated asyncio loop.

    All bus traffic, object export and signal emission happen on the loop
    thread. Application threads hand work over with :meth:`submit` (fire and
    forget, FIFO) or :meth:`run` (blocking, used only for one-time setup).
    """

    def __init__(self, bus_address: str = "", *, thread_name: str = "trayicon-dbus") -> None:
        self._bus_address = bus_address or None
        self._thread_name = thread_name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._bus: Optional[MessageBus] = None
        self._lock = threading.Lock()
        self._claims: Dict[str, object] = {}

    @property
    def bus(self) -> MessageBus:
        if self._bus is None:
            raise TrayOSError("Bus connection is not established")
        return self._bus

    @property
    def connected(self) -> bool:
        return self._bus is not None and self._bus.connected

    def connect(self) -> "BusConnection":
        """Start the loop thread and connect; idempotent.

        Raises:
            TrayOSError: If the bus cannot be reached.
        """
        with self._lock:
            if self._bus is not None:
                return self
            loop = asyncio.new_event_loop()
            thread = threading.Thread(
                target=self._run_loop, args=(loop,), name=self._thread_name, daemon=True
            )
            thread.start()
            self._loop = loop
            self._thread = thread
            connected = False
            try:
                self._bus = self.run(self._open())
                connected = True
            except (OSError, AuthError, InvalidAddressError, DBusError) as exc:
                raise TrayOSError(f"Failed to connect to the message bus: {exc}") from exc
            finally:
                if not connected:
                    self._shutdown_loop()
            LOGGER.info("Connected to message bus as %s", self._bus.unique_name)
            return self

    async def _open(self) -> MessageBus:
        # MessageBus binds to the running loop, so it is created on the loop thread.
        if self._bus_address:
            bus = MessageBus(bus_address=self._bus_address)
        else:
            bus = MessageBus(bus_type=BusType.SESSION)
        return await bus.connect()

    def claim_path(self, path: str, owner: object) -> None:
        """Reserve an object path for ``owner``.

        Raises:
            TrayOSError: If another owner already exports at ``path``.
        """
        with self._lock:
            current = self._claims.get(path)
            if current is not None and current is not owner:
                raise TrayOSError(
                    f"Object path {path} is already used by another tray icon "
                    "on this connection"
                )
            self._claims[path] = owner

    def release_paths(self, owner: object) -> None:
        """Drop every path reserved by ``owner``."""
        with self._lock:
            for path in [p for p, o in self._claims.items() if o is owner]:
                del self._claims[path]

    def run(self, coro: Awaitable[T], timeout: Optional[float] = None) -> T:
        """Run ``coro`` on the loop and wait for its result."""
        loop = self._require_loop()
        if threading.current_thread() is self._thread:
            raise RuntimeError("BusConnection.run() called from the bus thread")
        return asyncio.run_coroutine_threadsafe(coro, loop).result(timeout)  # type: ignore[arg-type]

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        """Schedule ``fn(*args)`` on the loop thread."""
        self._require_loop().call_soon_threadsafe(self._invoke, fn, args)

    def close(self) -> None:
        """Disconnect and stop the loop thread."""
        with self._lock:
            if self._bus is not None:
                self._bus.disconnect()
                self._bus = None
            self._shutdown_loop()

    def _invoke(self, fn: Callable[..., Any], args: tuple) -> None:
        try:
            fn(*args)
        except Exception:
            LOGGER.exception("Bus dispatch of %s failed", getattr(fn, "__name__", fn))

    def _require_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            raise TrayOSError("Bus connection is not established")
        return self._loop

    def _shutdown_loop(self) -> None:
        loop, thread = self._loop, self._thread
        self._loop = None
        self._thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            loop.close()


_shared_connection: Optional[BusConnection] = None
_shared_lock = threading.Lock()


def shared_connection(bus_address: str = "") -> BusConnection:
    """Return the process-wide connection, connecting on first use.

    The shared connection lives for the rest of the process.
    """
    global _shared_connection
    with _shared_lock:
        if _shared_connection is None:
            _shared_connection = BusConnection(bus_address).connect()
        return _shared_connection
