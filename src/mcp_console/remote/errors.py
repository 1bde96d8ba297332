"""Exceptions raised at the remote-service boundary.

SDK, transport and OS errors are wrapped here so callers handle one family.
"""


class RemoteError(Exception):
    """A request to the remote service failed."""


class ConnectionFailed(RemoteError):
    """The transport could not be opened or the session did not initialize."""
