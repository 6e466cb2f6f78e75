"""Point-in-time reachability queries."""

from __future__ import annotations

import logging

from .core import ConnectionStatus, NetworkCapability
from .platform.base import NetworkPlatform


__all__ = ["ReachabilityProbe", "get_current_status"]

logger = logging.getLogger(__name__)


def get_current_status(platform: NetworkPlatform) -> ConnectionStatus:
    """
    Gets the current connectivity status from the platform's capability record of the
    active network. No network traffic is generated.

    :param platform: The connectivity service to query.
    :returns: ``Available`` if there is an active network which has Internet
        capability, ``Unavailable`` otherwise.
    :raises PlatformUnavailableError: if the connectivity service cannot be obtained.
    """
    network = platform.active_network()
    capabilities = platform.network_capabilities(network)

    if capabilities is not None and NetworkCapability.INTERNET in capabilities:
        status = ConnectionStatus.Available
    else:
        status = ConnectionStatus.Unavailable

    logger.debug("Active network %s: %s", network, status.value)

    return status


class ReachabilityProbe:
    """Synchronous query of the current connectivity status

    :param platform: The connectivity service to query.
    """

    def __init__(self, platform: NetworkPlatform) -> None:
        self.platform = platform

    def current_status(self) -> ConnectionStatus:
        """See :func:`get_current_status`."""
        return get_current_status(self.platform)
