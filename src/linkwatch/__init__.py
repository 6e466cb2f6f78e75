# -*- coding: utf-8 -*-
"""
Network reachability monitoring. The platform's Internet-capability signal is exposed
as a single coherent stream of :class:`ConnectionStatus` values.
"""

__version__ = "1.0.0"
__author__ = "Sam Schott"


from .core import ConnectionStatus, NetworkCapability, NetworkRequest, Network
from .probe import ReachabilityProbe
from .watcher import ReachabilityWatcher
from .stream import ConnectivityStateStream, StatusSession
from .holder import ConnectivityStateHolder


__all__ = [
    "ConnectionStatus",
    "NetworkCapability",
    "NetworkRequest",
    "Network",
    "ReachabilityProbe",
    "ReachabilityWatcher",
    "ConnectivityStateStream",
    "StatusSession",
    "ConnectivityStateHolder",
]
