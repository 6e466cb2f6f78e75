from __future__ import annotations

import ast
import glob
import io
import logging

import click

from .output import ok, warn, echo
from .common import config_option, existing_config_option
from .core import ConfigKey, CliException


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _log_file(config_name: str) -> str:
    from ..utils.appdirs import get_log_path

    return get_log_path("linkwatch", f"{config_name}.log")


@click.group(help="View and manage the log.")
def log() -> None:
    pass


@log.command(name="show", help="Print the log file, with a pager if available.")
@existing_config_option
def log_show(config_name: str) -> None:
    log_file = _log_file(config_name)

    try:
        with open(log_file) as f:
            text = f.read()
    except OSError:
        raise CliException(f"Could not open log file at '{log_file}'")

    click.echo_via_pager(text)


@log.command(name="clear", help="Clear the log file and its backups.")
@existing_config_option
def log_clear(config_name: str) -> None:
    log_file = _log_file(config_name)

    # rotated files have numeric suffixes
    for path in [log_file] + glob.glob(f"{glob.escape(log_file)}.*"):
        try:
            open(path, "w").close()
        except FileNotFoundError:
            pass
        except OSError:
            raise CliException(f"Could not clear '{path}'. Please delete it manually")

    ok("Cleared log files.")


@log.command(name="level", help="Get or set the log level.")
@click.argument(
    "level_name",
    required=False,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
)
@config_option
def log_level(level_name: str | None, config_name: str) -> None:
    from ..config import LinkwatchConfig

    conf = LinkwatchConfig(config_name)

    if level_name:
        level_name = level_name.upper()
        conf.set("app", "log_level", logging.getLevelName(level_name))
        ok(f"Log level set to {level_name}.")
    else:
        echo(f"Log level: {logging.getLevelName(conf.get('app', 'log_level'))}")


@click.group(
    help="""
Direct access to config values.

Available config keys are:

\b
- log_level: level of the log file and the journal, as a number
- backend: connectivity backend (automatic, networkmanager or macos)
- reachability_host: host name whose reachability is reported on macOS
- dbus_timeout: timeout for calls to NetworkManager in seconds
""",
)
def config() -> None:
    pass


@config.command(name="get", help="Print the value of a given configuration key.")
@click.argument("key", type=ConfigKey())
@config_option
def config_get(key: str, config_name: str) -> None:
    from ..config import LinkwatchConfig
    from ..config.main import KEY_SECTION_MAP

    echo(str(LinkwatchConfig(config_name).get(KEY_SECTION_MAP[key], key)))


@config.command(
    name="set",
    help="""
Update configuration with a value for the given key.

The value is cast to the type of the key's default value. For instance, setting the
D-Bus timeout to 1 will store 1.0. Values of the wrong type are rejected.
""",
)
@click.argument("key", type=ConfigKey())
@click.argument("value")
@config_option
def config_set(key: str, value: str, config_name: str) -> None:
    from ..config import LinkwatchConfig
    from ..config.main import KEY_SECTION_MAP, DEFAULTS_CONFIG

    section = KEY_SECTION_MAP[key]
    py_value: object = value

    if not isinstance(DEFAULTS_CONFIG[section][key], str):
        try:
            py_value = ast.literal_eval(value)
        except (SyntaxError, ValueError):
            pass

    try:
        LinkwatchConfig(config_name).set(section, key, py_value)
    except ValueError as e:
        warn(e.args[0])
    else:
        ok(f"Set {key} to {py_value!r}.")


@config.command(name="show", help="Show all config keys and values.")
@config_option
def config_show(config_name: str) -> None:
    from ..config import LinkwatchConfig

    with io.StringIO() as fp:
        LinkwatchConfig(config_name).write(fp)
        echo(fp.getvalue())
