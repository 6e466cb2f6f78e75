from __future__ import annotations

import asyncio
from datetime import datetime

import click

from .common import convert_api_errors, config_option, open_platform
from .output import ok, warn
from ..constants import CONNECTED, DISCONNECTED
from ..core import ConnectionStatus


def show_status(status: ConnectionStatus, timestamp: bool = False) -> None:
    """
    Prints one of two messages for the given status.

    :param status: Status to print.
    :param timestamp: Whether to prefix the message with the current time.
    """
    prefix = f"{datetime.now():%H:%M:%S} " if timestamp else ""

    if status is ConnectionStatus.Available:
        ok(prefix + CONNECTED)
    else:
        warn(prefix + DISCONNECTED)


@click.command(help="Show whether the Internet is reachable.")
@config_option
@convert_api_errors
def status(config_name: str) -> None:
    from ..probe import get_current_status

    with open_platform(config_name) as platform:
        show_status(get_current_status(platform))


async def _watch(config_name: str) -> None:
    from ..holder import ConnectivityStateHolder
    from ..stream import ConnectivityStateStream

    with open_platform(config_name) as platform:
        stream = ConnectivityStateStream(platform)

        async with ConnectivityStateHolder(stream) as holder:
            show_status(holder.current(), timestamp=True)
            holder.subscribe(lambda s: show_status(s, timestamp=True))

            # returns only when the stream fails
            while True:
                await holder.wait_for_change()


@click.command(
    help="""
Print connectivity changes until interrupted.

The current state is printed first, followed by every change reported by the system.
""",
)
@config_option
@convert_api_errors
def watch(config_name: str) -> None:
    from ..logging import setup_logging

    setup_logging(config_name, stderr=False)

    try:
        asyncio.run(_watch(config_name))
    except KeyboardInterrupt:
        pass
