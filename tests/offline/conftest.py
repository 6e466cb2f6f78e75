# -*- coding: utf-8 -*-

import logging
import threading
from typing import Optional

import pytest

from linkwatch.core import Network, NetworkCapability, NetworkRequest
from linkwatch.errors import PlatformUnavailableError
from linkwatch.platform import NetworkCallback, NetworkPlatform


logging.getLogger("linkwatch").setLevel(logging.DEBUG)


WIFI = Network("/org/freedesktop/NetworkManager/ActiveConnection/1")
ETHERNET = Network("/org/freedesktop/NetworkManager/ActiveConnection/2")


class FakeNetworkPlatform(NetworkPlatform):
    """In-memory connectivity service which records registrations"""

    def __init__(
        self,
        network: Optional[Network] = WIFI,
        capabilities: frozenset = frozenset({NetworkCapability.INTERNET}),
    ) -> None:
        self.network = network
        self.capabilities = capabilities

        self.fail_queries = False
        self.fail_registration = False

        self.callbacks: list[NetworkCallback] = []
        self.registrations = 0
        self.unregistrations = 0
        self.closed = False

        self._lock = threading.Lock()

    # ---- NetworkPlatform -------------------------------------------------------------

    def active_network(self) -> Optional[Network]:
        if self.fail_queries:
            raise PlatformUnavailableError("Connectivity service unavailable")
        return self.network

    def network_capabilities(self, network: Optional[Network]) -> Optional[frozenset]:
        if self.fail_queries:
            raise PlatformUnavailableError("Connectivity service unavailable")
        if network is None or network != self.network:
            return None
        return self.capabilities

    def register_network_callback(
        self, request: NetworkRequest, callback: NetworkCallback
    ) -> None:
        if self.fail_registration:
            raise PlatformUnavailableError("Connectivity service unavailable")
        with self._lock:
            self.callbacks.append(callback)
            self.registrations += 1

    def unregister_network_callback(self, callback: NetworkCallback) -> None:
        with self._lock:
            try:
                self.callbacks.remove(callback)
            except ValueError:
                raise ValueError(f"{callback} is not registered")
            self.unregistrations += 1

    def close(self) -> None:
        self.closed = True

    # ---- event injection -------------------------------------------------------------

    @property
    def active_registrations(self) -> int:
        with self._lock:
            return len(self.callbacks)

    def fire_available(self, network: Network = WIFI) -> None:
        with self._lock:
            callbacks = list(self.callbacks)
        for callback in callbacks:
            callback.on_available(network)

    def fire_lost(self, network: Network = WIFI) -> None:
        with self._lock:
            callbacks = list(self.callbacks)
        for callback in callbacks:
            callback.on_lost(network)

    def fire_error(self, exc: Exception) -> None:
        with self._lock:
            callbacks = list(self.callbacks)
        for callback in callbacks:
            callback.on_error(exc)

    def fire_from_thread(self, *events: str) -> None:
        """Fires 'available' and 'lost' events in order from a separate thread."""

        def target() -> None:
            for event in events:
                if event == "available":
                    self.fire_available()
                else:
                    self.fire_lost()

        thread = threading.Thread(target=target)
        thread.start()
        thread.join()


@pytest.fixture
def platform():
    yield FakeNetworkPlatform()


@pytest.fixture
def offline_platform():
    yield FakeNetworkPlatform(network=None, capabilities=frozenset())


@pytest.fixture
def config_name(tmp_path, monkeypatch):
    from linkwatch.config import remove_configuration

    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("HOME", str(tmp_path))

    config_name = "test-config"

    yield config_name

    remove_configuration(config_name)
