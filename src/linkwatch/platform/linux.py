"""
Connectivity service on Linux, backed by the org.freedesktop.NetworkManager D-Bus API.

The D-Bus connection is served by an asyncio loop on a dedicated thread. Network
callbacks are therefore invoked from that thread.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from typing import Any, Coroutine, NamedTuple, Optional, TypeVar

from dbus_next import BusType, Variant  # type: ignore
from dbus_next.aio import MessageBus, ProxyInterface  # type: ignore

from .base import NetworkCallback, NetworkPlatform
from ..core import Network, NetworkCapability, NetworkRequest
from ..errors import PlatformError, PlatformUnavailableError


__all__ = ["NetworkManagerPlatform"]

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

NM_BUS_NAME = "org.freedesktop.NetworkManager"
NM_OBJECT_PATH = "/org/freedesktop/NetworkManager"
NM_INTERFACE = "org.freedesktop.NetworkManager"
PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"

# values of NMConnectivityState
NM_CONNECTIVITY_UNKNOWN = 0
NM_CONNECTIVITY_NONE = 1
NM_CONNECTIVITY_PORTAL = 2
NM_CONNECTIVITY_LIMITED = 3
NM_CONNECTIVITY_FULL = 4

NO_CONNECTION_PATH = "/"


def capabilities_for_connectivity(connectivity: int) -> frozenset[NetworkCapability]:
    """
    Translates an NMConnectivityState to the capabilities of the primary network.

    :param connectivity: NetworkManager's connectivity state.
    :returns: Capabilities of the primary network.
    """
    if connectivity == NM_CONNECTIVITY_FULL:
        return frozenset({NetworkCapability.INTERNET})
    elif connectivity == NM_CONNECTIVITY_PORTAL:
        return frozenset({NetworkCapability.CAPTIVE_PORTAL})
    else:
        return frozenset()


class NetworkSnapshot(NamedTuple):
    """Primary network and its capabilities at one point in time"""

    network: Optional[Network]
    capabilities: frozenset[NetworkCapability]

    @classmethod
    def from_properties(
        cls, primary_connection: str, connectivity: int
    ) -> NetworkSnapshot:
        if primary_connection == NO_CONNECTION_PATH:
            return cls(None, frozenset())
        return cls(
            Network(primary_connection), capabilities_for_connectivity(connectivity)
        )

    def satisfies(self, request: NetworkRequest) -> bool:
        return self.network is not None and request.satisfied_by(self.capabilities)


def dispatch_transition(
    callback: NetworkCallback,
    request: NetworkRequest,
    old: NetworkSnapshot,
    new: NetworkSnapshot,
) -> None:
    """
    Invokes the hooks of ``callback`` for a change from ``old`` to ``new``. When the
    primary network is replaced by another matching network, the old network is
    reported as lost before the new one is reported as available.
    """
    old_ok = old.satisfies(request)
    new_ok = new.satisfies(request)
    switched = old.network != new.network

    if old_ok and (not new_ok or switched):
        callback.on_lost(old.network)  # type: ignore[arg-type]

    if new_ok and (not old_ok or switched):
        callback.on_available(new.network)  # type: ignore[arg-type]


class NetworkManagerPlatform(NetworkPlatform):
    """
    :param timeout: Timeout in seconds for any D-Bus call.
    :raises PlatformUnavailableError: if NetworkManager cannot be reached on the system
        bus.
    """

    def __init__(self, timeout: float = 5.0) -> None:
        self.timeout = timeout

        self._lock = threading.Lock()
        self._closed = False
        self._callbacks: dict[NetworkCallback, NetworkRequest] = {}

        self._bus: Optional[MessageBus] = None
        self._interface: Optional[ProxyInterface] = None
        self._disconnect_task: Optional[asyncio.Task] = None
        self._properties: dict[str, Any] = {
            "PrimaryConnection": NO_CONNECTION_PATH,
            "Connectivity": NM_CONNECTIVITY_UNKNOWN,
        }
        self._snapshot = NetworkSnapshot(None, frozenset())

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="linkwatch-dbus",
            daemon=True,
        )
        self._thread.start()

        try:
            self._run(self._init_dbus())
        except Exception as exc:
            self.close()
            raise PlatformUnavailableError(
                "Could not connect to NetworkManager",
                "Please make sure that the NetworkManager service is running.",
            ) from exc

    # ---- event loop ------------------------------------------------------------------

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        try:
            self._loop.run_forever()
        finally:
            self._loop.close()

    def _run(self, coro: Coroutine[Any, Any, _T]) -> _T:
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            return future.result(self.timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise PlatformUnavailableError(
                "NetworkManager is not responding",
                f"No reply within {self.timeout} sec.",
            )

    async def _init_dbus(self) -> None:
        self._bus = await MessageBus(bus_type=BusType.SYSTEM).connect()
        introspection = await self._bus.introspect(NM_BUS_NAME, NM_OBJECT_PATH)
        proxy_object = self._bus.get_proxy_object(
            NM_BUS_NAME, NM_OBJECT_PATH, introspection
        )
        self._interface = proxy_object.get_interface(NM_INTERFACE)

        properties = proxy_object.get_interface(PROPERTIES_INTERFACE)
        properties.on_properties_changed(self._on_properties_changed)

        self._properties["PrimaryConnection"] = (
            await self._interface.get_primary_connection()
        )
        self._properties["Connectivity"] = await self._interface.get_connectivity()
        self._snapshot = NetworkSnapshot.from_properties(
            self._properties["PrimaryConnection"], self._properties["Connectivity"]
        )
        self._disconnect_task = asyncio.ensure_future(self._watch_disconnect())

    async def _read_snapshot(self) -> NetworkSnapshot:
        assert self._interface
        return NetworkSnapshot.from_properties(
            await self._interface.get_primary_connection(),
            await self._interface.get_connectivity(),
        )

    async def _watch_disconnect(self) -> None:
        assert self._bus
        try:
            await self._bus.wait_for_disconnect()
            exc = PlatformError("Lost connection to NetworkManager")
        except Exception as err:
            exc = PlatformError("Lost connection to NetworkManager", str(err))

        if self._closed:
            return

        logger.error(str(exc))

        with self._lock:
            callbacks = list(self._callbacks)

        for callback in callbacks:
            callback.on_error(exc)

    async def _shutdown(self) -> None:
        if self._disconnect_task:
            self._disconnect_task.cancel()
        if self._bus:
            self._bus.disconnect()

    # ---- signals ---------------------------------------------------------------------

    def _on_properties_changed(
        self,
        interface_name: str,
        changed_properties: dict[str, Variant],
        invalidated_properties: list[str],
    ) -> None:
        if interface_name != NM_INTERFACE:
            return

        updates = {
            name: variant.value
            for name, variant in changed_properties.items()
            if name in self._properties
        }

        if not updates:
            return

        self._properties.update(updates)

        old = self._snapshot
        new = NetworkSnapshot.from_properties(
            self._properties["PrimaryConnection"], self._properties["Connectivity"]
        )
        self._snapshot = new

        logger.debug("Primary network changed: %s -> %s", old, new)

        with self._lock:
            callbacks = list(self._callbacks.items())

        for callback, request in callbacks:
            try:
                dispatch_transition(callback, request, old, new)
            except Exception:
                logger.error("Error in network callback", exc_info=True)

    # ---- NetworkPlatform -------------------------------------------------------------

    def active_network(self) -> Optional[Network]:
        return self._run(self._read_snapshot()).network

    def network_capabilities(
        self, network: Optional[Network]
    ) -> Optional[frozenset[NetworkCapability]]:
        if network is None:
            return None

        snapshot = self._run(self._read_snapshot())

        if snapshot.network != network:
            return None

        return snapshot.capabilities

    def register_network_callback(
        self, request: NetworkRequest, callback: NetworkCallback
    ) -> None:
        with self._lock:
            if self._closed:
                raise PlatformUnavailableError(
                    "Connectivity service closed",
                    "Cannot register callbacks after closing the platform.",
                )
            self._callbacks[callback] = request

    def unregister_network_callback(self, callback: NetworkCallback) -> None:
        with self._lock:
            try:
                del self._callbacks[callback]
            except KeyError:
                raise ValueError(f"{callback} is not registered")

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._callbacks.clear()

        if self._thread.is_alive():
            try:
                self._run(self._shutdown())
            except PlatformUnavailableError:
                logger.warning("Could not disconnect from system bus", exc_info=True)
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(self.timeout)
