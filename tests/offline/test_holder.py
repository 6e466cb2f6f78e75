# -*- coding: utf-8 -*-

import asyncio

import pytest

from linkwatch.core import ConnectionStatus
from linkwatch.errors import NotRunningError, PlatformError, PlatformUnavailableError
from linkwatch.holder import ConnectivityStateHolder
from linkwatch.stream import ConnectivityStateStream


A = ConnectionStatus.Available
U = ConnectionStatus.Unavailable


def test_not_running_before_start(platform):
    holder = ConnectivityStateHolder(ConnectivityStateStream(platform))

    assert not holder.running

    with pytest.raises(NotRunningError):
        holder.current()


def test_initial_state(platform):
    async def main():
        async with ConnectivityStateHolder(ConnectivityStateStream(platform)) as holder:
            assert holder.running
            assert platform.active_registrations == 1
            return holder.current()

    assert asyncio.run(main()) is A
    assert platform.unregistrations == 1


def test_follows_changes(offline_platform):
    stream = ConnectivityStateStream(offline_platform)

    async def main():
        async with ConnectivityStateHolder(stream) as holder:
            states = [holder.current()]

            offline_platform.fire_available()
            states.append(await holder.wait_for_change(timeout=5))
            assert holder.current() is A

            offline_platform.fire_from_thread("lost")
            states.append(await holder.wait_for_change(timeout=5))
            assert holder.current() is U

            return states

    assert asyncio.run(main()) == [U, A, U]


def test_listeners(platform):
    received = []

    async def main():
        async with ConnectivityStateHolder(ConnectivityStateStream(platform)) as holder:
            unsubscribe = holder.subscribe(received.append)

            platform.fire_lost()
            await holder.wait_for_change(timeout=5)

            unsubscribe()

            platform.fire_available()
            await holder.wait_for_change(timeout=5)

    asyncio.run(main())

    assert received == [U]


def test_stop(platform):
    async def main():
        holder = ConnectivityStateHolder(ConnectivityStateStream(platform))
        await holder.start()

        waiter = asyncio.create_task(holder.wait_for_change())
        await asyncio.sleep(0)

        await holder.stop()
        await holder.stop()

        assert not holder.running

        with pytest.raises(NotRunningError):
            holder.current()

        with pytest.raises(NotRunningError):
            await waiter

    asyncio.run(main())

    assert platform.registrations == 1
    assert platform.unregistrations == 1


def test_cannot_start_twice(platform):
    async def main():
        async with ConnectivityStateHolder(ConnectivityStateStream(platform)) as holder:
            with pytest.raises(RuntimeError):
                await holder.start()

    asyncio.run(main())

    assert platform.registrations == 1


def test_restart_after_stop(platform):
    async def main():
        holder = ConnectivityStateHolder(ConnectivityStateStream(platform))

        await holder.start()
        await holder.stop()

        platform.network = None

        await holder.start()
        status = holder.current()
        await holder.stop()

        return status

    assert asyncio.run(main()) is U
    assert platform.registrations == 2
    assert platform.unregistrations == 2


def test_start_failure_exposes_nothing(platform):
    platform.fail_queries = True

    async def main():
        holder = ConnectivityStateHolder(ConnectivityStateStream(platform))

        with pytest.raises(PlatformUnavailableError):
            await holder.start()

        assert not holder.running

        with pytest.raises(NotRunningError):
            holder.current()

    asyncio.run(main())

    assert platform.active_registrations == 0


def test_failure_is_not_unavailable(platform):
    error = PlatformError("Lost connection to NetworkManager")

    async def main():
        async with ConnectivityStateHolder(ConnectivityStateStream(platform)) as holder:
            platform.fire_error(error)

            with pytest.raises(PlatformError):
                await holder.wait_for_change(timeout=5)

            assert not holder.running
            assert holder.error is error

            with pytest.raises(PlatformError):
                holder.current()

    asyncio.run(main())

    assert platform.unregistrations == 1


def test_restart_after_failure(platform):
    async def main():
        holder = ConnectivityStateHolder(ConnectivityStateStream(platform))
        await holder.start()

        platform.fire_error(PlatformError("Lost connection to NetworkManager"))

        with pytest.raises(PlatformError):
            await holder.wait_for_change(timeout=5)

        assert not holder.running

        platform.network = None

        status = await holder.start()

        assert holder.running
        assert holder.error is None
        assert holder.current() is U

        await holder.stop()

        return status

    assert asyncio.run(main()) is U
    assert platform.registrations == 2
    assert platform.unregistrations == 2
    assert platform.active_registrations == 0
