# -*- coding: utf-8 -*-
"""

Backends for the connectivity service of the operating system. These use non-polling
platform APIs only: the org.freedesktop.NetworkManager D-Bus service on Linux and
SCNetworkReachability on macOS.

"""
import logging
import platform

from .base import NetworkCallback, NetworkPlatform
from ..errors import PlatformUnavailableError

logger = logging.getLogger(__name__)


__all__ = ["NetworkCallback", "NetworkPlatform", "get_platform", "BACKENDS"]


BACKENDS = ("automatic", "networkmanager", "macos")


def get_platform(
    backend: str = "automatic", host: str = "www.apple.com", timeout: float = 5.0
) -> NetworkPlatform:
    """
    Returns a connected platform backend.

    :param backend: One of :data:`BACKENDS`. "automatic" selects the backend for the
        current operating system.
    :param host: Host name whose reachability is reported by the macOS backend.
    :param timeout: Timeout for D-Bus calls of the NetworkManager backend.
    :returns: Platform instance. Close it when it is no longer needed.
    :raises PlatformUnavailableError: if no backend is available for this system or the
        connectivity service cannot be obtained.
    """
    if backend == "automatic":
        if platform.system() == "Darwin":
            backend = "macos"
        elif platform.system() == "Linux":
            backend = "networkmanager"
        else:
            raise PlatformUnavailableError(
                "Unsupported platform",
                f"No connectivity backend for {platform.platform()}.",
            )

    logger.debug("Using %s connectivity backend", backend)

    if backend == "networkmanager":
        try:
            from .linux import NetworkManagerPlatform
        except ImportError as exc:
            raise PlatformUnavailableError(
                "NetworkManager backend not installed", "Please install dbus-next."
            ) from exc

        return NetworkManagerPlatform(timeout=timeout)

    elif backend == "macos":
        try:
            from .macos import SCNetworkReachabilityPlatform
        except (ImportError, OSError, ValueError) as exc:
            raise PlatformUnavailableError(
                "macOS backend not installed", "Please install rubicon-objc."
            ) from exc

        return SCNetworkReachabilityPlatform(host=host)

    else:
        raise PlatformUnavailableError(
            "Unknown connectivity backend",
            f"'{backend}' is not one of {', '.join(BACKENDS)}.",
        )
