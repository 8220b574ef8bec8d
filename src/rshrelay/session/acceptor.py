"""TCP acceptor that serves one remote shell connection at a time."""

from __future__ import annotations

import logging
import select
import socket
from typing import BinaryIO

from rshrelay.config.settings import Settings
from rshrelay.domain.errors import SetupError
from rshrelay.domain.models import SessionOutcome
from rshrelay.protocol.scanner import ResponseScanner
from rshrelay.session.abort import AbortToken
from rshrelay.session.loop import SessionLoop
from rshrelay.session.operator import OperatorInput

logger = logging.getLogger(__name__)


class ConnectionAcceptor:
    """Listens on a TCP port and hands each connection to a SessionLoop.

    Connections are served serially: the next one is accepted only after
    the current session returns. Waiting for a connection is interruptible
    by the abort token without a client having to arrive.

    Usage::

        with ConnectionAcceptor(settings, 4444, abort, operator, sys.stdout.buffer) as acceptor:
            acceptor.serve()
    """

    def __init__(
        self,
        settings: Settings,
        port: int,
        abort: AbortToken,
        operator: OperatorInput,
        output: BinaryIO,
    ) -> None:
        self._settings = settings
        self._port = port
        self._abort = abort
        self._operator = operator
        self._output = output
        self._sock: socket.socket | None = None
        self._sessions_served = 0
        self._last_outcome: SessionOutcome | None = None

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    @property
    def address(self) -> tuple[str, int]:
        """The bound (host, port); useful when listening on port 0."""
        if self._sock is None:
            raise SetupError("Server socket is not open")
        host, port = self._sock.getsockname()[:2]
        return host, port

    @property
    def sessions_served(self) -> int:
        return self._sessions_served

    @property
    def last_outcome(self) -> SessionOutcome | None:
        return self._last_outcome

    def open(self) -> None:
        """Create, bind and listen on the server socket.

        Raises:
            SetupError: If any of the three steps fails.
        """
        server = self._settings.server
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
        except OSError as e:
            raise SetupError(f"Fail to create the server socket: {e}") from e

        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((server.host, self._port))
        except OSError as e:
            sock.close()
            raise SetupError(f"Fail to bind the server to port {self._port}: {e}") from e

        try:
            sock.listen(server.backlog)
        except OSError as e:
            sock.close()
            raise SetupError(f"Fail to configure the server to listen connections: {e}") from e

        self._sock = sock

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def serve(self) -> None:
        """Accept and serve connections until the abort token is set.

        A failure while waiting on the listening socket is logged and ends
        serving; the caller then shuts down normally.
        """
        if self._sock is None:
            self.open()

        host, port = self.address
        logger.info("Starting server on %s:%d", host, port)

        while not self._abort.is_set():
            try:
                if not self._wait_for_client():
                    continue
            except (OSError, ValueError) as e:
                logger.error("Listening socket failed, no longer accepting: %s", e)
                return
            try:
                conn, addr = self._sock.accept()
            except OSError as e:
                logger.warning("Accept failed: %s", e)
                continue
            self._handle_client(conn, addr[0])

        logger.info("Abort requested, server stopped")

    def _wait_for_client(self) -> bool:
        readable, _, _ = select.select(
            [self._sock], [], [], self._settings.server.poll_interval
        )
        return bool(readable)

    def _handle_client(self, conn: socket.socket, peer: str) -> SessionOutcome:
        logger.info("Client %s connected", peer)
        with conn:
            scanner = ResponseScanner(
                self._output,
                self._abort,
                completion=self._settings.scan.completion,
                timeout_mode=self._settings.scan.timeout_mode,
                poll_interval=self._settings.server.poll_interval,
            )
            session = SessionLoop(
                endpoint=conn,
                operator=self._operator,
                scanner=scanner,
                abort=self._abort,
                scan_config=self._settings.scan,
                framing_config=self._settings.framing,
                peer=peer,
            )
            outcome = session.run()

        self._sessions_served += 1
        self._last_outcome = outcome
        logger.info("Client %s disconnected (%s)", peer, outcome.value)
        if outcome is SessionOutcome.INPUT_CLOSED:
            logger.warning("Operator input is closed; further sessions will end immediately")
        return outcome

    def __enter__(self) -> ConnectionAcceptor:
        self.open()
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.close()
