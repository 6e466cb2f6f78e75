# -*- coding: utf-8 -*-
"""
This module defines linkwatch's error classes. It should be kept free of memory heavy
imports.

All errors inherit from :class:`LinkwatchError` which has title and message attributes
to display the error to the user. Note that a failure of the platform is never reported
as :attr:`linkwatch.core.ConnectionStatus.Unavailable`: it is raised to whoever started
the observation.
"""


class LinkwatchError(Exception):
    """Base class for linkwatch errors

    :param title: A short description of the error type. This can be used in a CLI or
        GUI to give a short error summary.
    :param message: A more verbose description which can include instructions on how to
        proceed to fix the error.
    """

    def __init__(self, title: str, message: str = "") -> None:
        super().__init__(title, message)
        self.title = title
        self.message = message

    def __str__(self) -> str:
        if self.message:
            return ". ".join([self.title, self.message])
        return self.title


class PlatformUnavailableError(LinkwatchError):
    """Raised when the connectivity service of the platform cannot be obtained. This is
    a configuration error and fatal for any observation."""


class PlatformError(LinkwatchError):
    """Raised when the platform fails while a subscription is active. The affected
    stream terminates with this error."""


class NotRunningError(LinkwatchError):
    """Raised when reading a connectivity state which has not been observed yet or is
    no longer being observed."""
