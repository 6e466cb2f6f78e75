"""
This module provides custom click command line parameters for linkwatch, namely
:class:`ConfigKey` and :class:`ConfigName`, as well as a command group which prints its
commands in sections.
"""
from __future__ import annotations

from typing import Any

import click
from click.shell_completion import CompletionItem

from .output import warn


# ==== Custom parameter types ==========================================================


class ConfigKey(click.ParamType):
    """A command line parameter representing a config key

    Only keys of the user facing sections are accepted, the config version can not be
    accessed. Shell completion suggests all accepted keys.
    """

    name = "key"

    @staticmethod
    def _keys() -> dict[str, str]:
        from ..config.main import KEY_SECTION_MAP

        return {k: s for k, s in KEY_SECTION_MAP.items() if s != "main"}

    def convert(
        self,
        value: str,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> str:
        if value not in self._keys():
            raise CliException(f"'{value}' is not a valid configuration key.")
        return value

    def shell_complete(
        self,
        ctx: click.Context | None,
        param: click.Parameter | None,
        incomplete: str,
    ) -> list[CompletionItem]:
        return [CompletionItem(k) for k in self._keys() if k.startswith(incomplete)]


class ConfigName(click.ParamType):
    """A command line parameter representing a config name

    :param existing: If ``True`` require an existing config, otherwise create a new
        config on demand.
    """

    name = "config"

    def __init__(self, existing: bool = True) -> None:
        self.existing = existing

    def convert(
        self,
        value: str | None,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> str | None:
        from ..config import validate_config_name, list_configs

        if value is None:
            return value

        if self.existing and value not in list_configs():
            raise CliException(f"Configuration '{value}' does not exist.")

        try:
            return validate_config_name(value)
        except ValueError:
            raise CliException("Configuration name may not contain any whitespace")

    def shell_complete(
        self,
        ctx: click.Context | None,
        param: click.Parameter | None,
        incomplete: str,
    ) -> list[CompletionItem]:
        from ..config import list_configs

        return [CompletionItem(c) for c in list_configs() if c.startswith(incomplete)]


# ==== custom command group with ordered output ========================================


class OrderedGroup(click.Group):
    """Click command group which lists its commands under section headings, in the
    order in which they were added."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.sections: dict[str, list[str]] = {}

    def add_command(
        self, cmd: click.Command, name: str | None = None, section: str = "Commands"
    ) -> None:
        super().add_command(cmd, name)
        self.sections.setdefault(section, []).append(name or cmd.name or "")

    def format_commands(
        self, ctx: click.Context, formatter: click.HelpFormatter
    ) -> None:
        visible = {
            name: cmd
            for name, cmd in self.commands.items()
            if not cmd.hidden and any(name in names for names in self.sections.values())
        }

        if not visible:
            return

        limit = formatter.width - 6 - max(len(name) for name in visible)

        for section, names in self.sections.items():
            rows = [
                (name, visible[name].get_short_help_str(limit))
                for name in names
                if name in visible
            ]

            if rows:
                with formatter.section(section):
                    formatter.write_dl(rows)


# ==== custom exceptions ===============================================================


class CliException(click.ClickException):
    """
    Subclass of :class:`click.ClickException` which prints its message in the same
    style as other warnings.
    """

    def show(self, file: Any = None) -> None:
        warn(self.format_message())
