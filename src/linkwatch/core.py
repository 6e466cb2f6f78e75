"""
Dataclasses and enums shared between the engine and the platform backends.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import AbstractSet


# ==== status ==========================================================================


class ConnectionStatus(Enum):
    """Enum of connectivity states reported to consumers"""

    Available = "available"
    Unavailable = "unavailable"


# ==== networks ========================================================================


class NetworkCapability(Enum):
    """Enum of capabilities which a platform may report for a network"""

    INTERNET = "internet"
    """The network is able to reach the public Internet"""
    CAPTIVE_PORTAL = "captive_portal"
    """The network requires sign-in through a captive portal"""


@dataclass(frozen=True)
class Network:
    """A network as identified by the platform"""

    handle: str
    """Platform specific identifier, for instance a NetworkManager object path"""


@dataclass(frozen=True)
class NetworkRequest:
    """Capability filter for network callback registrations

    Only networks which offer all capabilities of the request trigger callbacks.
    """

    capabilities: frozenset[NetworkCapability] = field(default_factory=frozenset)

    def satisfied_by(self, capabilities: AbstractSet[NetworkCapability] | None) -> bool:
        """
        :param capabilities: Capabilities of a network or None if unknown.
        :returns: Whether a network with the given capabilities matches the request.
        """
        if capabilities is None:
            return False
        return self.capabilities <= capabilities


INTERNET_REQUEST = NetworkRequest(frozenset({NetworkCapability.INTERNET}))
"""Request for Internet-capable networks only"""
