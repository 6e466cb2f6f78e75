"""
This module contains the default configuration and a function to return existing config
instances for a specified config_name.
"""

from __future__ import annotations

import threading

from packaging.version import Version

from .user import UserConfig, _DefaultsType
from ..utils.appdirs import get_conf_path


CONFIG_DIR_NAME = "linkwatch"


# =============================================================================
#  Defaults
# =============================================================================

DEFAULTS_CONFIG: _DefaultsType = {
    "app": {
        "log_level": 20,  # log level for journal and file, default: INFO
    },
    "platform": {
        "backend": "automatic",  # connectivity backend, see platform.BACKENDS
        "reachability_host": "www.apple.com",  # host name checked on macOS
        "dbus_timeout": 5.0,  # timeout for NetworkManager calls in sec
    },
}


KEY_SECTION_MAP = {"version": "main"}

for section_name, section_values in DEFAULTS_CONFIG.items():
    for key in section_values.keys():
        KEY_SECTION_MAP[key] = section_name


# bump the major version when removing or renaming options, obsolete options are
# then dropped from existing files
CONF_VERSION = Version("1.0")


# =============================================================================
# Factories
# =============================================================================


_config_instances: dict[str, UserConfig] = {}
_config_lock = threading.Lock()


def LinkwatchConfig(config_name: str) -> UserConfig:
    """
    Returns an existing config instance or creates a new one.

    :param config_name: Name of the linkwatch configuration. A new config file will be
        created if none exists for the given config_name.
    :return: Config instance which saves any changes to the drive.
    """

    with _config_lock:
        try:
            return _config_instances[config_name]
        except KeyError:
            pass

        config_path = get_conf_path(CONFIG_DIR_NAME, f"{config_name}.ini")

        try:
            conf = UserConfig(
                config_path,
                defaults=DEFAULTS_CONFIG,
                version=CONF_VERSION,
                remove_obsolete=True,
            )
        except OSError:
            conf = UserConfig(
                config_path,
                defaults=DEFAULTS_CONFIG,
                version=CONF_VERSION,
                load=False,
            )

        _config_instances[config_name] = conf

        return conf
