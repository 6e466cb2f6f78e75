# -*- coding: utf-8 -*-
#
# Copyright 2012 Canonical Ltd.
#
# This program is free software: you can redistribute it and/or modify it
# under the terms of the GNU General Public License version 3, as published
# by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranties of
# MERCHANTABILITY, SATISFACTORY QUALITY, or FITNESS FOR A PARTICULAR
# PURPOSE.  See the GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along
# with this program.  If not, see <http://www.gnu.org/licenses/>.
"""Connectivity service on macOS.

SCNetworkReachabilityPlatform: reachability of a host name as reported by the system
configuration framework. Callbacks are scheduled on a serial dispatch queue and
invoked from a thread managed by libdispatch.

"""

from __future__ import annotations

import logging
import threading
from ctypes import (
    POINTER,
    CFUNCTYPE,
    Structure,
    pointer,
    c_bool,
    c_char_p,
    c_long,
    c_void_p,
    c_uint32,
)
from typing import Optional

from rubicon.objc.runtime import load_library  # type: ignore

from .base import NetworkCallback, NetworkPlatform
from ..core import Network, NetworkCapability, NetworkRequest
from ..errors import PlatformUnavailableError


__all__ = ["SCNetworkReachabilityPlatform", "flags_say_reachable"]

logger = logging.getLogger(__name__)


libsc = load_library("SystemConfiguration")
libcf = load_library("CoreFoundation")
libdispatch = load_library("System")

CFRelease = libcf.CFRelease
CFRelease.restype = None
CFRelease.argtypes = [c_void_p]

SCNRCreateWithName = libsc.SCNetworkReachabilityCreateWithName
SCNRCreateWithName.restype = c_void_p
SCNRCreateWithName.argtypes = [c_void_p, c_char_p]

SCNRGetFlags = libsc.SCNetworkReachabilityGetFlags
SCNRGetFlags.restype = c_bool
SCNRGetFlags.argtypes = [c_void_p, POINTER(c_uint32)]

SCNRSetDispatchQueue = libsc.SCNetworkReachabilitySetDispatchQueue
SCNRSetDispatchQueue.restype = c_bool
SCNRSetDispatchQueue.argtypes = [c_void_p, c_void_p]

SCNRCallbackType = CFUNCTYPE(None, c_void_p, c_uint32, c_void_p)
# NOTE: need to keep this reference alive as long as a callback might occur.

SCNRSetCallback = libsc.SCNetworkReachabilitySetCallback
SCNRSetCallback.restype = c_bool
SCNRSetCallback.argtypes = [c_void_p, SCNRCallbackType, c_void_p]

dispatch_queue_create = libdispatch.dispatch_queue_create
dispatch_queue_create.restype = c_void_p
dispatch_queue_create.argtypes = [c_char_p, c_void_p]

dispatch_release = libdispatch.dispatch_release
dispatch_release.restype = None
dispatch_release.argtypes = [c_void_p]

# values from SCNetworkReachability.h
kSCNetworkReachabilityFlagsReachable = 1 << 1
kSCNetworkReachabilityFlagsConnectionRequired = 1 << 2


def flags_say_reachable(flags: int) -> bool:
    """Check flags returned from SCNetworkReachability API. Returns bool.

    Requires some logic:
    reachable_flag isn't enough on its own.

    A down wifi will return flags = 7, or reachable_flag and
    connection_required_flag, meaning that the host *would be*
    reachable, but you need a connection first.  (And then you'd
    presumably be best off checking again.)
    """
    reachable = flags & kSCNetworkReachabilityFlagsReachable
    connection_required = flags & kSCNetworkReachabilityFlagsConnectionRequired

    return bool(reachable and not connection_required)


def get_reachability_flags(hostname: str) -> int:
    """Calls synchronous SCNR API, returns the reachability flags of ``hostname``."""
    target = SCNRCreateWithName(None, hostname.encode())
    if target is None:
        raise PlatformUnavailableError(
            "Error creating network reachability reference", hostname
        )

    flags = c_uint32(0)
    ok = SCNRGetFlags(target, pointer(flags))
    CFRelease(target)

    if not ok:
        raise PlatformUnavailableError(
            "Error getting reachability status", f"Host name '{hostname}'."
        )

    return flags.value


class SCNRContext(Structure):
    """A struct to send as SCNetworkReachabilityContext to SCNRSetCallback.

    We don't use the fields currently.
    """

    _fields_ = [
        ("version", c_long),
        ("info", c_void_p),
        ("retain", c_void_p),  # func ptr
        ("release", c_void_p),  # func ptr
        ("copyDescription", c_void_p),
    ]  # func ptr


class _ReachabilityTarget:
    """One scheduled SCNetworkReachability target per registered callback"""

    def __init__(
        self,
        network: Network,
        request: NetworkRequest,
        callback: NetworkCallback,
        queue: int,
    ) -> None:
        self.network = network
        self.request = request
        self.callback = callback
        self._satisfied = request.satisfied_by(
            _capabilities(get_reachability_flags(network.handle))
        )

        def reachability_state_changed_cb(targetref, flags, info):
            """Callback for SCNetworkReachability API

            This callback is passed to the SCNetworkReachability API,
            so its method signature has to be exactly this. Therefore,
            we declare it here and just call _state_changed with
            flags."""
            self._state_changed(flags)

        self._c_callback = SCNRCallbackType(reachability_state_changed_cb)
        self._context = SCNRContext(0, None, None, None, None)

        self._target = SCNRCreateWithName(None, network.handle.encode())
        if self._target is None:
            raise PlatformUnavailableError(
                "Error creating SCNetworkReachability target", network.handle
            )

        ok = SCNRSetCallback(self._target, self._c_callback, pointer(self._context))
        if not ok:
            CFRelease(self._target)
            raise PlatformUnavailableError(
                "Error setting SCNetworkReachability callback", network.handle
            )

        ok = SCNRSetDispatchQueue(self._target, queue)
        if not ok:
            CFRelease(self._target)
            raise PlatformUnavailableError(
                "Error scheduling SCNetworkReachability target", network.handle
            )

    def _state_changed(self, flags: int) -> None:
        satisfied = self.request.satisfied_by(_capabilities(flags))

        if satisfied == self._satisfied:
            return

        self._satisfied = satisfied

        try:
            if satisfied:
                self.callback.on_available(self.network)
            else:
                self.callback.on_lost(self.network)
        except Exception:
            logger.error("Error in network callback", exc_info=True)

    def cancel(self) -> None:
        SCNRSetDispatchQueue(self._target, None)
        SCNRSetCallback(self._target, SCNRCallbackType(), None)
        CFRelease(self._target)


def _capabilities(flags: int) -> frozenset[NetworkCapability]:
    if flags_say_reachable(flags):
        return frozenset({NetworkCapability.INTERNET})
    return frozenset()


class SCNetworkReachabilityPlatform(NetworkPlatform):
    """
    :param host: Host name whose reachability is reported. No traffic is sent to this
        host, the system only evaluates its routing tables.
    """

    def __init__(self, host: str = "www.apple.com") -> None:
        self.host = host
        self.network = Network(host)

        self._lock = threading.Lock()
        self._targets: dict[NetworkCallback, _ReachabilityTarget] = {}
        self._queue = dispatch_queue_create(b"linkwatch.reachability", None)

        if not self._queue:
            raise PlatformUnavailableError("Could not create dispatch queue")

    def active_network(self) -> Optional[Network]:
        flags = get_reachability_flags(self.host)
        return self.network if flags & kSCNetworkReachabilityFlagsReachable else None

    def network_capabilities(
        self, network: Optional[Network]
    ) -> Optional[frozenset[NetworkCapability]]:
        if network != self.network:
            return None
        return _capabilities(get_reachability_flags(self.host))

    def register_network_callback(
        self, request: NetworkRequest, callback: NetworkCallback
    ) -> None:
        with self._lock:
            if not self._queue:
                raise PlatformUnavailableError("Connectivity service closed")
            self._targets[callback] = _ReachabilityTarget(
                self.network, request, callback, self._queue
            )

    def unregister_network_callback(self, callback: NetworkCallback) -> None:
        with self._lock:
            try:
                target = self._targets.pop(callback)
            except KeyError:
                raise ValueError(f"{callback} is not registered")

        target.cancel()

    def close(self) -> None:
        with self._lock:
            targets = list(self._targets.values())
            self._targets.clear()
            queue, self._queue = self._queue, None

        for target in targets:
            target.cancel()

        if queue:
            dispatch_release(queue)
