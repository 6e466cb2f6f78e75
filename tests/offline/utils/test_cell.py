# -*- coding: utf-8 -*-

import asyncio
import threading

import pytest

from linkwatch.errors import NotRunningError
from linkwatch.utils.cell import StateCell


def test_empty():
    cell = StateCell()

    assert not cell.has_value
    assert cell.error is None

    with pytest.raises(NotRunningError):
        cell.value


def test_set_and_read():
    cell = StateCell()
    cell.set(1)
    cell.set(2)

    assert cell.has_value
    assert cell.value == 2


def test_fail():
    cell = StateCell()
    cell.set(1)
    cell.fail(RuntimeError("stream ended"))

    assert not cell.has_value

    with pytest.raises(RuntimeError, match="stream ended"):
        cell.value

    cell.clear()

    with pytest.raises(NotRunningError):
        cell.value


def test_listeners_see_equal_values():
    cell = StateCell()
    received = []

    unsubscribe = cell.subscribe(received.append)
    cell.set("a")
    cell.set("a")
    unsubscribe()
    unsubscribe()
    cell.set("b")

    assert received == ["a", "a"]


def test_listener_errors_are_contained(caplog):
    cell = StateCell()
    received = []

    def broken(value):
        raise ValueError("broken listener")

    cell.subscribe(broken)
    cell.subscribe(received.append)

    cell.set(1)

    assert cell.value == 1
    assert received == [1]
    assert "Error in state listener" in caplog.text


def test_wait_for_change():
    cell = StateCell()

    async def main():
        waiter = asyncio.create_task(cell.wait_for_change())
        await asyncio.sleep(0)
        cell.set(3)
        return await waiter

    assert asyncio.run(main()) == 3


def test_wait_for_change_from_thread():
    cell = StateCell()

    async def main():
        waiter = asyncio.create_task(cell.wait_for_change(timeout=5))
        await asyncio.sleep(0)

        thread = threading.Thread(target=cell.set, args=(4,))
        thread.start()
        thread.join()

        return await waiter

    assert asyncio.run(main()) == 4


def test_wait_for_change_timeout():
    cell = StateCell()

    async def main():
        with pytest.raises(asyncio.TimeoutError):
            await cell.wait_for_change(timeout=0.01)

    asyncio.run(main())


def test_wait_for_change_failure():
    cell = StateCell()

    async def main():
        waiter = asyncio.create_task(cell.wait_for_change())
        await asyncio.sleep(0)
        cell.fail(RuntimeError("stream ended"))

        with pytest.raises(RuntimeError):
            await waiter

        # already failed
        with pytest.raises(RuntimeError):
            await cell.wait_for_change()

    asyncio.run(main())
