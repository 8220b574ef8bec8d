"""Response scanner for the remote shell byte stream.

Reads the remote output one byte at a time, echoes it to the operator,
and decides when the response to the last framed command is complete.
ETX (0x03) and EOT (0x04) are the sentinel bytes requested by the framer
and are never echoed. By default the response is complete once both have
been seen and a space follows, since the shell prints its prompt right
after the sentinel.
"""

from __future__ import annotations

import logging
import select
import socket
import time
from typing import BinaryIO

from rshrelay.domain.errors import StreamError
from rshrelay.domain.models import (
    CompletionTrigger,
    ScanOutcome,
    ScanResult,
    ScanState,
    TimeoutMode,
)
from rshrelay.protocol.framer import END_OF_TEXT, END_OF_TRANSMISSION
from rshrelay.session.abort import AbortToken

logger = logging.getLogger(__name__)

SPACE = 0x20
DEFAULT_POLL_INTERVAL = 0.25


class ResponseScanner:
    """Consumes one response from a connected endpoint.

    Usage::

        scanner = ResponseScanner(sys.stdout.buffer, abort)
        result = scanner.scan(conn, timeout=120.0)
        if result.outcome is ScanOutcome.COMPLETE:
            ...
    """

    def __init__(
        self,
        output: BinaryIO,
        abort: AbortToken,
        completion: CompletionTrigger = CompletionTrigger.SENTINEL_THEN_SPACE,
        timeout_mode: TimeoutMode = TimeoutMode.IDLE,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._output = output
        self._abort = abort
        self._completion = CompletionTrigger(completion)
        self._timeout_mode = TimeoutMode(timeout_mode)
        self._poll_interval = poll_interval
        self._pending_flush = False

    def scan(self, endpoint: socket.socket, timeout: float) -> ScanResult:
        """Read and echo bytes until the response completes or times out.

        Args:
            endpoint: Connected socket to read from.
            timeout: Seconds without a byte (or in total, depending on the
                     timeout mode) before giving up on the response.

        Returns:
            The scan outcome and counters.

        Raises:
            StreamError: If waiting or reading fails, or the remote closed
                the connection.
        """
        state = ScanState()
        deadline = time.monotonic() + timeout
        try:
            while True:
                if self._abort.is_set():
                    return self._finish(ScanOutcome.ABORTED, state)

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return self._finish(ScanOutcome.TIMEOUT, state)

                self._flush()
                if not self._wait_readable(endpoint, min(remaining, self._poll_interval)):
                    continue

                if self._handle_byte(self._read_byte(endpoint), state):
                    return self._finish(ScanOutcome.COMPLETE, state)

                if self._timeout_mode is TimeoutMode.IDLE:
                    deadline = time.monotonic() + timeout
        finally:
            self._flush()

    def _handle_byte(self, byte: int, state: ScanState) -> bool:
        """Classify one byte. Returns True when the response is complete."""
        if byte == END_OF_TRANSMISSION:
            state.seen_eot = True
            return self._completion is CompletionTrigger.SENTINEL and state.sentinel_seen
        if byte == END_OF_TEXT:
            state.seen_etx = True
            return self._completion is CompletionTrigger.SENTINEL and state.sentinel_seen

        self._echo(byte, state)
        return (
            byte == SPACE
            and state.sentinel_seen
            and self._completion is CompletionTrigger.SENTINEL_THEN_SPACE
        )

    def _wait_readable(self, endpoint: socket.socket, timeout: float) -> bool:
        try:
            readable, _, _ = select.select([endpoint], [], [], timeout)
        except (OSError, ValueError) as e:
            raise StreamError(f"Failed waiting for remote output: {e}") from e
        return bool(readable)

    def _read_byte(self, endpoint: socket.socket) -> int:
        try:
            data = endpoint.recv(1)
        except OSError as e:
            raise StreamError(f"Failed to read remote output: {e}") from e
        if not data:
            raise StreamError("Connection closed by remote")
        return data[0]

    def _echo(self, byte: int, state: ScanState) -> None:
        self._output.write(bytes((byte,)))
        state.byte_count += 1
        self._pending_flush = True

    def _flush(self) -> None:
        if self._pending_flush:
            self._output.flush()
            self._pending_flush = False

    def _finish(self, outcome: ScanOutcome, state: ScanState) -> ScanResult:
        logger.debug(
            "Scan finished: %s (%d bytes, etx=%s, eot=%s)",
            outcome.value, state.byte_count, state.seen_etx, state.seen_eot,
        )
        return ScanResult.from_state(outcome, state)
