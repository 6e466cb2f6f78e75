#
# Copyright © Spyder Project Contributors
# Licensed under the terms of the MIT License
# (see spyder/__init__.py for details)

"""
This module provides user configuration file management, derived from the config module
of the Spyder IDE. Values are stored in an ini file as Python literals and are returned
with the type of their default value.
"""

from __future__ import annotations

import ast
import os
import os.path as osp
import copy
import logging
import configparser as cp
from threading import RLock
from typing import Any, Dict

from packaging.version import Version


logger = logging.getLogger(__name__)

_DefaultsType = Dict[str, Dict[str, Any]]


class NoDefault:
    pass


def _parse(raw_value: str, default_value: Any) -> Any:
    """Converts a stored string back to a Python value like the default."""
    if isinstance(default_value, str):
        return raw_value
    try:
        return ast.literal_eval(raw_value)
    except (SyntaxError, ValueError):
        return raw_value


class UserConfig(cp.ConfigParser):
    """
    Config file based on ConfigParser. This class is safe to use from different
    threads but must not be used from different processes!

    :param path: Configuration file will be saved to this path.
    :param defaults: Dictionary containing sections and their default options.
    :param load: Whether to load existing values from ``path``.
    :param version: Version of the configuration file.
    :param remove_obsolete: If ``True``, options which are no longer in the defaults are
        removed from the saved file on a major version change.

    .. note:: The ``get`` and ``set`` arguments number and type differ from the
        reimplemented methods.
    """

    DEFAULT_SECTION_NAME = "main"

    def __init__(
        self,
        path: str,
        defaults: _DefaultsType | None = None,
        load: bool = True,
        version: Version = Version("0.0.0"),
        remove_obsolete: bool = False,
    ) -> None:
        super().__init__(interpolation=None)

        self._path = path
        self._lock = RLock()

        self.default_config = copy.deepcopy(defaults or {})
        self.default_config.setdefault(self.DEFAULT_SECTION_NAME, {})
        self.default_config[self.DEFAULT_SECTION_NAME]["version"] = str(version)

        self.reset_to_defaults(save=False)

        if not load:
            return

        # values from the file override the defaults
        try:
            self.read(path, encoding="utf-8")
        except cp.MissingSectionHeaderError:
            logger.error("Config file %s contains no section headers", path)

        old_version = Version(self.get(self.DEFAULT_SECTION_NAME, "version"))

        if version != old_version:
            if remove_obsolete and version.major > old_version.major:
                self.remove_deprecated_options(save=False)
            self.set_version(version, save=False)

        self.save()

    @property
    def config_path(self) -> str:
        """The ini file where this configuration is stored."""
        return self._path

    def save(self) -> None:
        """Save config into the associated file."""
        with self._lock:
            os.makedirs(osp.dirname(self._path), exist_ok=True)

            with open(self._path, "w", encoding="utf-8") as f:
                self.write(f)

    def cleanup(self) -> None:
        """Remove the config file and reset to defaults."""
        with self._lock:
            self.reset_to_defaults(save=False)

            try:
                os.remove(self._path)
            except FileNotFoundError:
                pass

    def remove_deprecated_options(self, save: bool = True) -> None:
        """Remove options which are present in the file but not in defaults."""
        with self._lock:
            for section in self.sections():
                for option in self.options(section):
                    if self.get_default(section, option) is NoDefault:
                        self.remove_option(section, option)
                if not self.options(section):
                    self.remove_section(section)

            if save:
                self.save()

    def get_version(self) -> Version:
        """
        :returns: Configuration (not application!) version.
        """
        return Version(self.get(self.DEFAULT_SECTION_NAME, "version"))

    def set_version(self, version: Version, save: bool = True) -> None:
        """
        Set configuration (not application!) version.

        :param version: New version to set.
        :param save: Whether to save changes to drive.
        """
        self.set(self.DEFAULT_SECTION_NAME, "version", str(version), save=save)

    def reset_to_defaults(self, section: str | None = None, save: bool = True) -> None:
        """
        Reset config to default values.

        :param section: The section to reset. If not given, reset all sections.
        :param save: Whether to save the changes to the drive.
        """
        with self._lock:
            for sec, options in self.default_config.items():
                if section in (None, sec):
                    for option, value in options.items():
                        self._set(sec, option, value)
            if save:
                self.save()

    def get_default(self, section: str, option: str) -> Any:
        """
        :returns: Default value or :class:`NoDefault` if section / option do not exist.
        """
        return self.default_config.get(section, {}).get(option, NoDefault)

    def get(self, section: str, option: str, default: Any = NoDefault) -> Any:  # type: ignore
        """
        Get an option.

        :param section: Config section to search in.
        :param option: Config option to get.
        :param default: Default value to fall back to if not present.
        :returns: Config value.
        :raises cp.NoSectionError: if the section does not exist.
        :raises cp.NoOptionError: if the option does not exist and no default is given.
        """
        with self._lock:
            try:
                raw_value = super().get(section, option, raw=True)
            except (cp.NoSectionError, cp.NoOptionError):
                if default is NoDefault:
                    raise
                return default

            default_value = self.get_default(section, option)
            value = _parse(raw_value, default_value)
            expected = type(default_value)

            if default_value is not NoDefault and type(value) is not expected:
                logger.error(
                    "Inconsistent config type for [%s][%s]. Expected %s but got %s.",
                    section,
                    option,
                    expected.__name__,
                    type(value).__name__,
                )

            return value

    def set(self, section: str, option: str, value: Any, save: bool = True) -> None:  # type: ignore
        """
        Set an ``option`` on a given ``section``.

        :param section: Config section to search in.
        :param option: Config option to set.
        :param value: Config value.
        :param save: Whether to save the changes to the drive.
        :raises ValueError: if the value has a different type than the default.
        """
        with self._lock:
            default_value = self.get_default(section, option)

            if default_value is NoDefault:
                self.default_config.setdefault(section, {})[option] = value
            else:
                if isinstance(default_value, float) and isinstance(value, int):
                    value = float(value)

                if type(default_value) is not type(value):
                    raise ValueError(
                        f"Inconsistent type for config value [{section}][{option}]. "
                        f"Expected {type(default_value).__name__} but "
                        f"got {type(value).__name__}."
                    )

            self._set(section, option, value)

            if save:
                self.save()

    def _set(self, section: str, option: str, value: Any) -> None:
        if not self.has_section(section):
            self.add_section(section)

        super().set(section, option, value if isinstance(value, str) else repr(value))
