"""Exception hierarchy for rshrelay."""

from __future__ import annotations


class RelayError(Exception):
    """Base class for all rshrelay errors."""


class SetupError(RelayError):
    """Raised when the listening socket cannot be created, bound or listened on.

    Fatal: the process reports it and exits with a failure status.
    """


class StreamError(RelayError):
    """Raised when the active connection can no longer be used.

    Covers read, write and wait failures as well as the remote side
    closing the stream. Ends the current session only.
    """

    def __init__(self, message: str, peer: str = "") -> None:
        super().__init__(message)
        self.peer = peer


class FramingError(RelayError):
    """Raised when an operator line cannot be framed for transmission."""

    def __init__(self, message: str, length: int = 0, limit: int = 0) -> None:
        super().__init__(message)
        self.length = length
        self.limit = limit
