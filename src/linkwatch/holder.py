"""
This module provides the consumer facing connectivity state: a cell with the latest
state which is kept up to date from one stream session.
"""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Any, Callable, Optional, Type

from .core import ConnectionStatus
from .errors import NotRunningError
from .stream import ConnectivityStateStream, StatusSession
from .utils.cell import StateCell


__all__ = ["ConnectivityStateHolder"]

logger = logging.getLogger(__name__)


class ConnectivityStateHolder:
    """Latest connectivity state of the host

    The holder owns exactly one session of the given stream while it is running. It
    becomes readable only once the first state has been probed, there is no default
    value::

        async with ConnectivityStateHolder(stream) as holder:
            if holder.current() is ConnectionStatus.Available:
                ...

    If the stream fails, :meth:`current` raises the stream's error from then on instead
    of returning a state which can no longer be verified.

    :param stream: The stream to subscribe to.
    """

    def __init__(self, stream: ConnectivityStateStream) -> None:
        self.stream = stream
        self._cell: StateCell[ConnectionStatus] = StateCell()
        self._session: Optional[StatusSession] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        """Whether the holder is subscribed to the stream."""
        return self._session is not None and not self._session.closed

    @property
    def error(self) -> Optional[Exception]:
        """The error which terminated the stream, if any."""
        return self._cell.error

    async def start(self) -> ConnectionStatus:
        """
        Subscribes to the stream and waits for the first state. A holder whose stream
        has failed is restarted with a new session, the stored error is discarded.

        :returns: The current state.
        :raises RuntimeError: if the holder is already running.
        :raises PlatformUnavailableError: if the connectivity service cannot be
            obtained. The holder is not started in this case.
        """
        if self._session is not None:
            if not self._session.closed:
                raise RuntimeError("ConnectivityStateHolder is already running")
            await self.stop()

        session = self.stream.subscribe()
        await session.start()
        initial = await session.__anext__()

        self._session = session
        self._cell.set(initial)
        self._task = asyncio.create_task(self._forward(session))

        logger.info("Connectivity: %s", initial.value)

        return initial

    async def _forward(self, session: StatusSession) -> None:
        try:
            async for status in session:
                logger.debug("Connectivity: %s", status.value)
                self._cell.set(status)
        except Exception as exc:
            logger.error("Connectivity stream failed: %s", exc, exc_info=True)
            self._cell.fail(exc)

    async def stop(self) -> None:
        """
        Cancels the subscription. Reading the state afterwards raises
        :exc:`NotRunningError`. Calling this more than once is harmless.
        """
        session, self._session = self._session, None
        task, self._task = self._task, None

        if session:
            session.close()

        if task:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        if session:
            self._cell.clear()

    def current(self) -> ConnectionStatus:
        """
        :returns: The latest state.
        :raises NotRunningError: if the holder was not started or has been stopped.
        :raises Exception: the error which terminated the stream.
        """
        if self._session is None:
            raise NotRunningError("Connectivity is not being observed")
        return self._cell.value

    def subscribe(
        self, callback: Callable[[ConnectionStatus], Any]
    ) -> Callable[[], None]:
        """
        Registers a listener for state changes. It is called from the event loop
        which started the holder.

        :param callback: Called with every new state.
        :returns: A function to remove the listener.
        """
        return self._cell.subscribe(callback)

    async def wait_for_change(
        self, timeout: Optional[float] = None
    ) -> ConnectionStatus:
        """
        Suspends until the next state arrives.

        :param timeout: Maximum time to wait in seconds.
        :returns: The new state.
        :raises asyncio.TimeoutError: if there was no change within the timeout.
        :raises NotRunningError: if the holder is stopped while waiting.
        """
        return await self._cell.wait_for_change(timeout)

    async def __aenter__(self) -> ConnectivityStateHolder:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.stop()
