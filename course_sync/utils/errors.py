"""
Exception types raised by the sync tool.

``SyncRequestError`` marks a caller mistake (HTTP-style 400): nothing has
been read or written when it is raised.  ``BackendNotConfiguredError``
is raised when an operation needs the content store but no database
path was configured.
"""


class SyncRequestError(Exception):
    """The request is malformed; no partial work was attempted."""

    status = 400


class BackendNotConfiguredError(Exception):
    """No content store is configured for an operation that needs one."""

    def __init__(self, message: str = "Backend not configured") -> None:
        super().__init__(message)
