"""Session loop orchestrator for one remote shell connection."""

from __future__ import annotations

import logging
import socket

from rshrelay.config.settings import FramingConfig, ScanConfig
from rshrelay.domain.errors import FramingError, StreamError
from rshrelay.domain.models import FramedCommand, ScanOutcome, SessionOutcome
from rshrelay.protocol.framer import frame_command
from rshrelay.protocol.scanner import ResponseScanner
from rshrelay.session.abort import AbortToken
from rshrelay.session.operator import OperatorInput

logger = logging.getLogger(__name__)


class SessionLoop:
    """Drives the command/response cycle for a single connection.

    The loop strictly alternates between waiting for an operator line and
    waiting for remote output; the two sources are never awaited at the
    same time. The connection itself is owned by the caller.
    """

    def __init__(
        self,
        endpoint: socket.socket,
        operator: OperatorInput,
        scanner: ResponseScanner,
        abort: AbortToken,
        scan_config: ScanConfig | None = None,
        framing_config: FramingConfig | None = None,
        peer: str = "",
    ) -> None:
        self._endpoint = endpoint
        self._operator = operator
        self._scanner = scanner
        self._abort = abort
        self._scan_config = scan_config or ScanConfig()
        self._framing_config = framing_config or FramingConfig()
        self._exit_command = self._framing_config.exit_command.encode()
        self._peer = peer
        self._commands_sent = 0

    @property
    def commands_sent(self) -> int:
        return self._commands_sent

    def run(self) -> SessionOutcome:
        """Run cycles until exit, abort, end of input or a broken stream."""
        try:
            # Drain and display the initial remote prompt.
            if self._scan(self._scan_config.prompt_timeout) is ScanOutcome.ABORTED:
                return SessionOutcome.ABORTED

            while not self._abort.is_set():
                line = self._operator.readline()
                if line is None or self._abort.is_set():
                    return SessionOutcome.ABORTED
                if not line:
                    logger.info("Operator input closed")
                    return SessionOutcome.INPUT_CLOSED

                try:
                    framed = frame_command(line, self._framing_config.max_command_length)
                except FramingError as e:
                    logger.warning("Command rejected, not sent: %s", e)
                    continue

                self._send(framed)
                if line == self._exit_command:
                    logger.info("Exit command sent to %s", self._peer or "remote")
                    return SessionOutcome.EXIT

                if self._scan(self._scan_config.reply_timeout) is ScanOutcome.ABORTED:
                    return SessionOutcome.ABORTED

            return SessionOutcome.ABORTED
        except StreamError as e:
            logger.error("Session with %s failed: %s", self._peer or "remote", e)
            return SessionOutcome.STREAM_FAILED

    def _send(self, framed: FramedCommand) -> None:
        try:
            self._endpoint.sendall(framed.payload)
        except OSError as e:
            raise StreamError(f"Failed to send command: {e}", peer=self._peer) from e
        self._commands_sent += 1
        if framed.sentinel_only:
            logger.debug("Sent bare sentinel request (%d bytes)", framed.length)
        else:
            logger.debug("Sent command (%d bytes)", framed.length)

    def _scan(self, timeout: float) -> ScanOutcome:
        result = self._scanner.scan(self._endpoint, timeout)
        if result.outcome is ScanOutcome.TIMEOUT:
            logger.debug("No complete response within %.1fs", timeout)
        return result.outcome
