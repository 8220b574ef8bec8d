"""Abort-aware line reader for operator input."""

from __future__ import annotations

import io
import logging
import os
import select
from typing import BinaryIO

from rshrelay.session.abort import AbortToken

logger = logging.getLogger(__name__)

READ_CHUNK = 1024


class OperatorInput:
    """Reads newline-terminated command lines typed by the operator.

    When the stream is backed by a file descriptor, reads go straight to
    the descriptor in ``poll_interval`` slices so that an abort is noticed
    while the operator is idle. Streams without a descriptor (in-memory
    buffers) are read with a plain ``readline()``.
    """

    def __init__(
        self,
        stream: BinaryIO,
        abort: AbortToken,
        poll_interval: float = 0.25,
    ) -> None:
        self._stream = stream
        self._abort = abort
        self._poll_interval = poll_interval
        self._fd = _fileno(stream)
        self._buffer = bytearray()
        self._eof = False

    def readline(self) -> bytes | None:
        """Return the next line including its newline.

        Returns ``b""`` once the input is exhausted, and ``None`` if the
        abort token was set before a full line arrived. A final line
        without a newline is returned as-is.
        """
        if self._fd is None:
            line = self._stream.readline()
            if self._abort.is_set():
                return None
            return line

        while True:
            idx = self._buffer.find(b"\n")
            if idx >= 0:
                line = bytes(self._buffer[: idx + 1])
                del self._buffer[: idx + 1]
                return line
            if self._eof:
                line = bytes(self._buffer)
                self._buffer.clear()
                return line
            if self._abort.is_set():
                return None
            self._fill()

    def _fill(self) -> None:
        try:
            readable, _, _ = select.select([self._fd], [], [], self._poll_interval)
            if not readable:
                return
            chunk = os.read(self._fd, READ_CHUNK)
        except OSError as e:
            logger.warning("Operator input failed, treating as end of input: %s", e)
            self._eof = True
            return
        if not chunk:
            self._eof = True
        self._buffer.extend(chunk)


def _fileno(stream: BinaryIO) -> int | None:
    try:
        return stream.fileno()
    except (AttributeError, OSError, io.UnsupportedOperation):
        return None
