"""A single-slot observable value."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Generic, Optional, TypeVar

from ..errors import NotRunningError


__all__ = ["StateCell"]

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

_EMPTY: Any = object()


def _resolve(future: asyncio.Future, value: Any, exc: Optional[BaseException]) -> None:
    if future.done():
        return
    if exc is not None:
        future.set_exception(exc)
    else:
        future.set_result(value)


class StateCell(Generic[_T]):
    """Holds the last known value of a stream

    The value can be read at any time, listeners are called synchronously on every
    update and :meth:`wait_for_change` suspends until the next update. Once the cell
    has failed, reading it raises the failure instead of returning a stale value.
    Updates may be made from any thread.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._value: Any = _EMPTY
        self._error: Optional[Exception] = None
        self._listeners: list[Callable[[_T], Any]] = []
        self._waiters: list[asyncio.Future] = []

    @property
    def has_value(self) -> bool:
        """Whether a value can be read."""
        with self._lock:
            return self._value is not _EMPTY and self._error is None

    @property
    def error(self) -> Optional[Exception]:
        """The error which the cell has failed with, if any."""
        return self._error

    @property
    def value(self) -> _T:
        """
        The last value.

        :raises NotRunningError: if no value was set yet or the cell was cleared.
        :raises Exception: the error passed to :meth:`fail`.
        """
        with self._lock:
            if self._error is not None:
                raise self._error
            if self._value is _EMPTY:
                raise NotRunningError("No state has been observed")
            return self._value

    def set(self, value: _T) -> None:
        """
        Replaces the value and notifies listeners and waiters. Equal consecutive values
        are notified as well.

        :param value: New value.
        """
        with self._lock:
            self._value = value
            self._error = None
            listeners = list(self._listeners)

        self._wake(value, None)

        for listener in listeners:
            try:
                listener(value)
            except Exception:
                logger.error("Error in state listener %s", listener, exc_info=True)

    def fail(self, exc: Exception) -> None:
        """
        Marks the cell as failed. Any reads and waiters will raise ``exc``.

        :param exc: The error which ended the stream behind this cell.
        """
        with self._lock:
            self._error = exc

        self._wake(None, exc)

    def clear(self) -> None:
        """Removes the value. Waiters are woken with :exc:`NotRunningError`."""
        with self._lock:
            self._value = _EMPTY
            self._error = None

        self._wake(None, NotRunningError("State is no longer observed"))

    def subscribe(self, callback: Callable[[_T], Any]) -> Callable[[], None]:
        """
        Registers a listener for future values. Listeners are called from the thread
        which updates the cell and must not block.

        :param callback: Called with every new value.
        :returns: A function to remove the listener again.
        """
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                try:
                    self._listeners.remove(callback)
                except ValueError:
                    pass

        return unsubscribe

    async def wait_for_change(self, timeout: Optional[float] = None) -> _T:
        """
        Suspends until a new value is set.

        :param timeout: Maximum time to wait in seconds.
        :returns: The new value.
        :raises asyncio.TimeoutError: if no value was set within the timeout.
        :raises Exception: the error passed to :meth:`fail`.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        with self._lock:
            if self._error is not None:
                raise self._error
            self._waiters.append(future)

        try:
            return await asyncio.wait_for(future, timeout)
        finally:
            with self._lock:
                if future in self._waiters:
                    self._waiters.remove(future)

    def _wake(self, value: Any, exc: Optional[BaseException]) -> None:
        with self._lock:
            waiters, self._waiters = self._waiters, []

        for future in waiters:
            try:
                future.get_loop().call_soon_threadsafe(_resolve, future, value, exc)
            except RuntimeError:
                pass
