"""
This module composes the probe and the watcher into a stream of connection states which
starts with the current state.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Optional, Type

from .core import ConnectionStatus, NetworkRequest, INTERNET_REQUEST
from .platform.base import NetworkPlatform
from .probe import ReachabilityProbe
from .watcher import ReachabilityWatcher


__all__ = ["ConnectivityStateStream", "StatusSession"]

logger = logging.getLogger(__name__)


class StatusSession:
    """A single observation of connection states

    The first state is probed when the session starts, every following state is
    forwarded from one :class:`ReachabilityWatcher` in the order the platform delivered
    it. The session starts on entering ``async with`` or on the first iteration and
    ends when it is closed, its iterating task is cancelled or the platform fails.

    :param probe: Probe for the initial state.
    :param watcher: Fresh watcher which will be owned by this session.
    """

    def __init__(self, probe: ReachabilityProbe, watcher: ReachabilityWatcher) -> None:
        self.probe = probe
        self.watcher = watcher
        self._initial: Optional[ConnectionStatus] = None
        self._started = False

    @property
    def started(self) -> bool:
        """Whether the session has been started."""
        return self._started

    @property
    def closed(self) -> bool:
        """Whether the session has ended."""
        return self.watcher.closed

    async def start(self) -> ConnectionStatus:
        """
        Registers with the platform and probes the current state. The registration is
        made first so that no transition after the probe can be missed. If either step
        fails, any registration is undone and the error is raised.

        :returns: The current state, which will also be the first element of the
            iteration.
        :raises RuntimeError: if the session was started before.
        :raises PlatformUnavailableError: if the connectivity service cannot be
            obtained.
        """
        if self._started:
            raise RuntimeError("Session was already started")
        if self.closed:
            raise RuntimeError("Session is closed")

        self._started = True
        self.watcher.observe()

        try:
            self._initial = self.probe.current_status()
        except BaseException:
            try:
                self.watcher.close()
            except Exception:
                logger.warning("Could not unregister network callback", exc_info=True)
            raise

        logger.debug("Session started with %s", self._initial)

        return self._initial

    def close(self) -> None:
        """Ends the session and unregisters from the platform."""
        self.watcher.close()

    async def aclose(self) -> None:
        """Async version of :meth:`close`."""
        self.close()

    def __aiter__(self) -> StatusSession:
        return self

    async def __anext__(self) -> ConnectionStatus:
        if self.closed:
            raise StopAsyncIteration

        if not self._started:
            await self.start()

        if self._initial is not None:
            initial, self._initial = self._initial, None
            return initial

        return await self.watcher.__anext__()

    async def __aenter__(self) -> StatusSession:
        if not self._started:
            await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()


class ConnectivityStateStream:
    """Stream of connectivity states of the host

    Every call to :meth:`subscribe` returns an independent session with its own probe
    and its own platform registration::

        stream = ConnectivityStateStream(platform)

        async with stream.subscribe() as session:
            async for status in session:
                print(status)

    :param platform: The connectivity service. It is not closed by the stream.
    :param request: Capability filter for the platform registrations.
    """

    def __init__(
        self, platform: NetworkPlatform, request: NetworkRequest = INTERNET_REQUEST
    ) -> None:
        self.platform = platform
        self.request = request
        self.probe = ReachabilityProbe(platform)

    def current_status(self) -> ConnectionStatus:
        """Returns the current state without subscribing."""
        return self.probe.current_status()

    def subscribe(self) -> StatusSession:
        """
        :returns: A new session which has not been started yet.
        """
        watcher = ReachabilityWatcher(self.platform, self.request)
        return StatusSession(self.probe, watcher)
