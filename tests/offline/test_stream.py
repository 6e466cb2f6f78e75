# -*- coding: utf-8 -*-

import asyncio
import gc
import itertools

import pytest

from linkwatch.core import ConnectionStatus
from linkwatch.errors import PlatformError, PlatformUnavailableError
from linkwatch.stream import ConnectivityStateStream


A = ConnectionStatus.Available
U = ConnectionStatus.Unavailable

EVENT_STATUS = {"available": A, "lost": U}

EVENT_SEQUENCES = [
    seq for n in range(4) for seq in itertools.product(["available", "lost"], repeat=n)
]


async def take(aiterator, n):
    return [await aiterator.__anext__() for _ in range(n)]


def fire(platform, events):
    for event in events:
        if event == "available":
            platform.fire_available()
        else:
            platform.fire_lost()


@pytest.mark.parametrize("online", [True, False])
@pytest.mark.parametrize("events", EVENT_SEQUENCES)
def test_probe_then_events(platform, online, events):
    if not online:
        platform.network = None

    expected = [A if online else U] + [EVENT_STATUS[e] for e in events]

    async def main():
        async with ConnectivityStateStream(platform).subscribe() as session:
            fire(platform, events)
            return await asyncio.wait_for(take(session, len(expected)), 5)

    assert asyncio.run(main()) == expected
    assert platform.unregistrations == 1


def test_available_then_lost(platform):
    async def main():
        session = ConnectivityStateStream(platform).subscribe()
        first = await session.__anext__()
        platform.fire_lost()
        second = await session.__anext__()
        await session.aclose()
        return [first, second]

    assert asyncio.run(main()) == [A, U]


def test_flapping_from_unavailable(offline_platform):
    async def main():
        async with ConnectivityStateStream(offline_platform).subscribe() as session:
            offline_platform.fire_from_thread("available", "lost", "available")
            return await asyncio.wait_for(take(session, 4), 5)

    assert asyncio.run(main()) == [U, A, U, A]


def test_no_deduplication(platform):
    async def main():
        async with ConnectivityStateStream(platform).subscribe() as session:
            platform.fire_available()
            platform.fire_available()
            return await take(session, 3)

    assert asyncio.run(main()) == [A, A, A]


def test_query_failure_emits_nothing(platform):
    platform.fail_queries = True

    async def main():
        session = ConnectivityStateStream(platform).subscribe()

        with pytest.raises(PlatformUnavailableError):
            await session.__anext__()

        assert session.closed

        with pytest.raises(StopAsyncIteration):
            await session.__anext__()

    asyncio.run(main())

    assert platform.registrations == 1
    assert platform.active_registrations == 0


def test_registration_failure_emits_nothing(platform):
    platform.fail_registration = True

    async def main():
        with pytest.raises(PlatformUnavailableError):
            async with ConnectivityStateStream(platform).subscribe():
                pass

    asyncio.run(main())

    assert platform.active_registrations == 0


def test_independent_sessions(platform):
    probes = []
    query = platform.active_network

    def counting_query():
        probes.append(1)
        return query()

    platform.active_network = counting_query

    async def main():
        stream = ConnectivityStateStream(platform)

        async with stream.subscribe() as s1, stream.subscribe() as s2:
            assert platform.active_registrations == 2
            assert s1.watcher is not s2.watcher

            first = await s1.__anext__(), await s2.__anext__()
            platform.fire_lost()
            second = await s1.__anext__(), await s2.__anext__()

            await s1.aclose()
            assert platform.active_registrations == 1

            platform.fire_available()
            third = await s2.__anext__()

        return first, second, third

    assert asyncio.run(main()) == ((A, A), (U, U), A)
    assert len(probes) == 2
    assert platform.registrations == 2
    assert platform.unregistrations == 2


def test_cancel_before_events(platform):
    async def consume(session):
        return [status async for status in session]

    async def main():
        session = ConnectivityStateStream(platform).subscribe()
        task = asyncio.create_task(consume(session))

        while not session.started:
            await asyncio.sleep(0)
        await asyncio.sleep(0)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        # duplicate cancel signals
        session.close()
        await session.aclose()

    asyncio.run(main())

    assert platform.registrations == 1
    assert platform.unregistrations == 1
    assert platform.active_registrations == 0


@pytest.mark.parametrize("n_events", [1, 5, 20])
def test_cancel_after_events(platform, n_events):
    received = []

    async def consume(session):
        async for status in session:
            received.append(status)

    async def main():
        session = ConnectivityStateStream(platform).subscribe()
        task = asyncio.create_task(consume(session))

        while not session.started:
            await asyncio.sleep(0)

        platform.fire_from_thread(*["lost", "available"] * n_events)

        while len(received) < 2 * n_events + 1:
            await asyncio.sleep(0.01)

        task.cancel()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        session.close()

    asyncio.run(asyncio.wait_for(main(), 10))

    assert len(received) == 2 * n_events + 1
    assert platform.unregistrations == 1
    assert platform.active_registrations == 0


def test_mid_stream_failure(platform):
    async def main():
        async with ConnectivityStateStream(platform).subscribe() as session:
            assert await session.__anext__() is A

            platform.fire_error(PlatformError("Lost connection to NetworkManager"))

            with pytest.raises(PlatformError):
                await session.__anext__()

            assert session.closed

    asyncio.run(main())

    assert platform.unregistrations == 1


def test_session_cannot_restart(platform):
    async def main():
        session = ConnectivityStateStream(platform).subscribe()
        await session.start()

        with pytest.raises(RuntimeError):
            await session.start()

        session.close()

        with pytest.raises(StopAsyncIteration):
            await session.__anext__()

    asyncio.run(main())


def test_current_status(offline_platform):
    stream = ConnectivityStateStream(offline_platform)
    assert stream.current_status() is U
    assert offline_platform.registrations == 0


def test_abandoned_session_unregisters(platform):
    async def main():
        async for status in ConnectivityStateStream(platform).subscribe():
            break

        gc.collect()
        await asyncio.sleep(0)

        return status

    assert asyncio.run(main()) is A
    assert platform.registrations == 1
    assert platform.unregistrations == 1
    assert platform.active_registrations == 0


def test_query_failure_with_teardown_error(platform, monkeypatch):
    platform.fail_queries = True

    def unregister(callback):
        raise ValueError(f"{callback} is not registered")

    monkeypatch.setattr(platform, "unregister_network_callback", unregister)

    async def main():
        session = ConnectivityStateStream(platform).subscribe()

        # the query error is raised, not the teardown error
        with pytest.raises(PlatformUnavailableError):
            await session.start()

        assert session.closed

    asyncio.run(main())
