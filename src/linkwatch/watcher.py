"""
This module bridges network callbacks of the platform into an asynchronous iterator of
connection states.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import weakref
from types import TracebackType
from typing import Any, NamedTuple, Optional, Type

from .core import ConnectionStatus, Network, NetworkRequest, INTERNET_REQUEST
from .platform.base import NetworkCallback, NetworkPlatform


__all__ = ["ReachabilityWatcher"]

logger = logging.getLogger(__name__)


class _Failure(NamedTuple):
    exc: Exception


_CLOSED = object()


class _CallbackAdapter(NetworkCallback):
    """Maps platform events to connection states

    Only a weak reference to the watcher is kept so that the platform, which holds the
    adapter, does not keep an abandoned watcher alive.
    """

    def __init__(self, watcher: ReachabilityWatcher) -> None:
        self._watcher = weakref.ref(watcher)

    def on_available(self, network: Network) -> None:
        watcher = self._watcher()
        if watcher:
            watcher._send(ConnectionStatus.Available)

    def on_lost(self, network: Network) -> None:
        watcher = self._watcher()
        if watcher:
            watcher._send(ConnectionStatus.Unavailable)

    def on_error(self, exc: Exception) -> None:
        watcher = self._watcher()
        if watcher:
            watcher._fail(exc)


class _Registration:
    """Registration state of one watcher, shared with its finalizer"""

    def __init__(self, platform: NetworkPlatform, callback: NetworkCallback) -> None:
        self.platform = platform
        self.callback = callback
        self.lock = threading.Lock()
        self.started = False
        self.registered = False
        self.closed = False

    def mark_closed(self) -> Optional[bool]:
        """
        :returns: None if the registration was closed before, otherwise whether the
            callback is registered and must be unregistered by the caller.
        """
        with self.lock:
            if self.closed:
                return None
            self.closed = True
            return self.registered

    def unregister(self) -> None:
        self.platform.unregister_network_callback(self.callback)
        logger.debug("Unregistered network callback %s", self.callback)


def _release_abandoned(registration: _Registration) -> None:
    # runs when a watcher is garbage collected without being closed
    if registration.mark_closed():
        logger.debug("Watcher was not closed, releasing %s", registration.callback)
        try:
            registration.unregister()
        except Exception:
            logger.warning("Could not unregister network callback", exc_info=True)


class ReachabilityWatcher:
    """Watches the platform for networks becoming available or being lost

    Each availability event is reported as :attr:`ConnectionStatus.Available` and each
    loss as :attr:`ConnectionStatus.Unavailable`, in the order of delivery and without
    de-duplication. Events may be delivered from any thread, they are handed over to
    the event loop which called :meth:`observe` without ever blocking the caller.

    A watcher can only be observed once. Use it as an async context manager or close it
    explicitly to unregister from the platform. Cancelling a task which awaits the next
    state closes the watcher as well, and so does garbage collection of a watcher which
    was never closed::

        async with ReachabilityWatcher(platform).observe() as watcher:
            async for status in watcher:
                print(status)

    :param platform: The connectivity service to observe.
    :param request: Capability filter for the registration.
    """

    def __init__(
        self, platform: NetworkPlatform, request: NetworkRequest = INTERNET_REQUEST
    ) -> None:
        self.platform = platform
        self.request = request

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._callback = _CallbackAdapter(self)
        self._registration = _Registration(platform, self._callback)

        weakref.finalize(self, _release_abandoned, self._registration)

    @property
    def closed(self) -> bool:
        """Whether the observation has ended."""
        return self._registration.closed

    @property
    def registered(self) -> bool:
        """Whether a platform callback is currently registered."""
        registration = self._registration
        with registration.lock:
            return registration.registered and not registration.closed

    def observe(self) -> ReachabilityWatcher:
        """
        Registers a network callback with the platform. Must be called from a running
        event loop.

        :returns: The watcher itself, to iterate over.
        :raises RuntimeError: if the watcher was observed before.
        :raises PlatformUnavailableError: if the registration failed.
        """
        registration = self._registration

        with registration.lock:
            if registration.started:
                raise RuntimeError(
                    "A ReachabilityWatcher can only be observed once, "
                    "create a new instance instead"
                )
            registration.started = True

        self._loop = asyncio.get_running_loop()

        try:
            self.platform.register_network_callback(self.request, self._callback)
        except BaseException:
            with registration.lock:
                registration.closed = True
            raise

        with registration.lock:
            registration.registered = True
            closed_meanwhile = registration.closed

        logger.debug("Registered network callback %s", self._callback)

        if closed_meanwhile:
            registration.unregister()

        return self

    def close(self) -> None:
        """
        Ends the observation. The platform callback is unregistered exactly once, no
        matter how often this is called or from which thread. Events still in flight
        are discarded.
        """
        registered = self._registration.mark_closed()

        if registered is None:
            return

        self._put(_CLOSED)

        if registered:
            self._registration.unregister()

    async def aclose(self) -> None:
        """Async version of :meth:`close`."""
        self.close()

    # ---- delivery from platform threads ----------------------------------------------

    def _put(self, item: Any) -> None:
        if not self._loop:
            return

        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, item)
        except RuntimeError:
            # event loop is closed, nobody is listening anymore
            logger.debug("Event loop closed, dropping %s", item)

    def _send(self, status: ConnectionStatus) -> None:
        if self.closed:
            logger.debug("Watcher closed, dropping %s", status)
            return
        self._put(status)

    def _fail(self, exc: Exception) -> None:
        if self.closed:
            return
        self._put(_Failure(exc))

    # ---- async iterator --------------------------------------------------------------

    def __aiter__(self) -> ReachabilityWatcher:
        return self

    async def __anext__(self) -> ConnectionStatus:
        if not self._registration.started:
            raise RuntimeError("Call observe() before iterating over the watcher")

        if self.closed:
            raise StopAsyncIteration

        try:
            item = await self._queue.get()
        except asyncio.CancelledError:
            self.close()
            raise

        if isinstance(item, _Failure):
            try:
                self.close()
            except Exception:
                logger.warning("Could not unregister network callback", exc_info=True)
            raise item.exc

        if item is _CLOSED or self.closed:
            raise StopAsyncIteration

        return item

    async def __aenter__(self) -> ReachabilityWatcher:
        if not self._registration.started:
            self.observe()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()
