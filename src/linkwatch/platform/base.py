# -*- coding: utf-8 -*-
"""
Interface to the connectivity service of the operating system. The engine treats
implementations of :class:`NetworkPlatform` as the sole source of truth on reachability.
"""

from __future__ import annotations

from types import TracebackType
from typing import Optional, Type

from ..core import Network, NetworkCapability, NetworkRequest


__all__ = ["NetworkCallback", "NetworkPlatform"]


class NetworkCallback:
    """Receives network events from a :class:`NetworkPlatform`

    Hooks may be called from a thread which is managed by the platform and must return
    quickly. Subclasses override the events they are interested in.
    """

    def on_available(self, network: Network) -> None:
        """Called when a network which satisfies the request became available."""

    def on_lost(self, network: Network) -> None:
        """Called when a network which satisfied the request was lost."""

    def on_error(self, exc: Exception) -> None:
        """Called when the platform can no longer deliver events to this callback."""


class NetworkPlatform:
    """Base class for platform connectivity services"""

    def active_network(self) -> Optional[Network]:
        """
        :returns: The network currently used for default traffic, if any.
        :raises PlatformUnavailableError: if the platform service cannot be reached.
        """
        raise NotImplementedError()

    def network_capabilities(
        self, network: Optional[Network]
    ) -> Optional[frozenset[NetworkCapability]]:
        """
        Returns the cached capability record of a network. No network traffic is
        generated.

        :param network: Network to inspect.
        :returns: Capabilities or None if the network is None or unknown.
        :raises PlatformUnavailableError: if the platform service cannot be reached.
        """
        raise NotImplementedError()

    def register_network_callback(
        self, request: NetworkRequest, callback: NetworkCallback
    ) -> None:
        """
        Registers a callback for networks which satisfy ``request``. The same callback
        object must be passed to :meth:`unregister_network_callback`.

        :param request: Capability filter.
        :param callback: Callback to register.
        :raises PlatformUnavailableError: if the platform service cannot be reached.
        """
        raise NotImplementedError()

    def unregister_network_callback(self, callback: NetworkCallback) -> None:
        """
        Unregisters a callback previously passed to :meth:`register_network_callback`.

        :param callback: Callback to unregister.
        :raises ValueError: if the callback is not registered.
        """
        raise NotImplementedError()

    def close(self) -> None:
        """Releases any resources held by the platform service."""

    def __enter__(self) -> NetworkPlatform:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()
