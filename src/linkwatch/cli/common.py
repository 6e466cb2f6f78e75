from __future__ import annotations

import functools
import sys
from typing import Callable, TypeVar, TYPE_CHECKING
from typing_extensions import ParamSpec

import click

from .core import ConfigName
from .output import warn
from ..constants import DEFAULT_CONFIG_NAME

if TYPE_CHECKING:
    from ..platform import NetworkPlatform


P = ParamSpec("P")
T = TypeVar("T")


def convert_api_errors(func: Callable[P, T]) -> Callable[P, T]:
    """
    Decorator that catches a LinkwatchError and prints a formatted error message to
    stdout before exiting. Calls ``sys.exit(1)`` after printing the error to stdout.
    """

    from ..errors import LinkwatchError

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return func(*args, **kwargs)
        except LinkwatchError as exc:
            warn(str(exc))
            sys.exit(1)

    return wrapper


def open_platform(config_name: str) -> NetworkPlatform:
    """
    Opens the connectivity backend selected in the given configuration.

    :param config_name: Name of the config which selects and configures the backend.
    :returns: Connected platform. The caller is responsible for closing it.
    :raises PlatformUnavailableError: if the backend cannot be used on this system.
    """
    from ..config import LinkwatchConfig
    from ..platform import get_platform

    conf = LinkwatchConfig(config_name)

    return get_platform(
        conf.get("platform", "backend"),
        host=conf.get("platform", "reachability_host"),
        timeout=conf.get("platform", "dbus_timeout"),
    )


config_option = click.option(
    "-c",
    "--config-name",
    default=DEFAULT_CONFIG_NAME,
    type=ConfigName(existing=False),
    is_eager=True,
    expose_value=True,
    help="Run command with the given configuration.",
)

existing_config_option = click.option(
    "-c",
    "--config-name",
    default=DEFAULT_CONFIG_NAME,
    type=ConfigName(),
    is_eager=True,
    expose_value=True,
    help="Run command with the given configuration.",
)
