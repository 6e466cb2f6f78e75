"""
This module contains functions to retrieve platform dependent locations for the config
and log files of linkwatch. It supports macOS and Linux, any other platform is treated
like Linux and uses the XDG base directories.
"""

# system imports
import os
import platform
from os import path as osp
from typing import Optional


__all__ = ["get_home_dir", "get_conf_path", "get_log_path"]


# kind: (macOS folder relative to home, XDG variable, XDG fallback relative to home)
_BASE_DIRS = {
    "conf": ("Library/Application Support", "XDG_CONFIG_HOME", ".config"),
    "log": ("Library/Logs", "XDG_CACHE_HOME", ".cache"),
}


def get_home_dir() -> str:
    """
    Returns user home directory as determined by ``osp.expanduser("~")``.

    :raises RuntimeError: if the home directory does not exist.
    """
    path = osp.expanduser("~")

    if osp.isdir(path):
        return path
    raise RuntimeError(
        "Please set the environment variable HOME to your user/home directory."
    )


def _get_path(
    kind: str, subfolder: Optional[str], filename: Optional[str], create: bool
) -> str:
    darwin_dir, xdg_var, xdg_fallback = _BASE_DIRS[kind]

    if platform.system() == "Darwin":
        path = osp.join(get_home_dir(), *darwin_dir.split("/"))
    else:
        path = os.environ.get(xdg_var, osp.join(get_home_dir(), xdg_fallback))

    if subfolder:
        path = osp.join(path, subfolder)
    if create:
        os.makedirs(path, exist_ok=True)
    if filename:
        path = osp.join(path, filename)

    return path


def get_conf_path(
    subfolder: Optional[str] = None, filename: Optional[str] = None, create: bool = True
) -> str:
    """
    Returns the default config path for the platform. This will be:

        - macOS: "~/Library/Application Support/SUBFOLDER/FILENAME"
        - Linux: "$XDG_CONFIG_HOME/SUBFOLDER/FILENAME"
        - fallback: "$HOME/.config/SUBFOLDER/FILENAME"

    :param subfolder: The subfolder for the app.
    :param filename: The filename to append for the app.
    :param create: If ``True``, the folder ``subfolder`` will be created on-demand.
    """
    return _get_path("conf", subfolder, filename, create)


def get_log_path(
    subfolder: Optional[str] = None, filename: Optional[str] = None, create: bool = True
) -> str:
    """
    Returns the default log path for the platform. This will be:

        - macOS: "~/Library/Logs/SUBFOLDER/FILENAME"
        - Linux: "$XDG_CACHE_HOME/SUBFOLDER/FILENAME"
        - fallback: "$HOME/.cache/SUBFOLDER/FILENAME"
    """
    return _get_path("log", subfolder, filename, create)
