"""Shared test fixtures for the rshrelay test suite.

Provides connected socket pairs, an abort token, an in-memory output
sink, fast settings and a scripted fake remote shell.
"""

from __future__ import annotations

import io
import socket
import threading
from collections.abc import Callable, Iterator

import pytest

from rshrelay.config.settings import Settings
from rshrelay.protocol.scanner import ResponseScanner
from rshrelay.session.abort import AbortToken

FAST_POLL = 0.02


# ---------------------------------------------------------------------------
# Fake remote shell
# ---------------------------------------------------------------------------


class FakeShell(threading.Thread):
    """Plays the remote agent on the far end of a socket.

    Sends ``prompt`` on start. For every line received it looks up the
    command (the part before `` ; ``) in ``responses`` and answers with
    the output, the two sentinel bytes and the prompt again, the way a
    POSIX shell runs ``cmd ; printf "\\x03\\x04"``.
    """

    def __init__(
        self,
        sock: socket.socket,
        responses: dict[bytes, bytes] | None = None,
        prompt: bytes = b"$ ",
    ) -> None:
        super().__init__(daemon=True)
        self.sock = sock
        self.responses = responses or {}
        self.prompt = prompt
        self.received: list[bytes] = []

    def run(self) -> None:
        try:
            self.sock.sendall(self.prompt)
            with self.sock.makefile("rb") as reader:
                for line in reader:
                    self.received.append(line)
                    command = line.split(b" ; ", 1)[0] if b" ; " in line else b""
                    if command == b"exit":
                        break
                    output = self.responses.get(command, b"")
                    self.sock.sendall(output + b"\x03\x04" + self.prompt)
        except OSError:
            pass


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def abort() -> AbortToken:
    return AbortToken()


@pytest.fixture
def sink() -> io.BytesIO:
    """Stands in for the operator's terminal."""
    return io.BytesIO()


@pytest.fixture
def socket_pair() -> Iterator[tuple[socket.socket, socket.socket]]:
    """(local, remote) connected sockets, closed after the test."""
    local, remote = socket.socketpair()
    yield local, remote
    local.close()
    remote.close()


@pytest.fixture
def poll_interval() -> float:
    """Abort polling slice used throughout the suite."""
    return FAST_POLL


@pytest.fixture
def fast_settings(poll_interval: float) -> Settings:
    """Settings with short timeouts and a fine poll interval."""
    return Settings(
        server={"host": "127.0.0.1", "poll_interval": poll_interval},
        scan={"prompt_timeout": 0.2, "reply_timeout": 2.0},
    )


@pytest.fixture
def scanner(sink: io.BytesIO, abort: AbortToken, poll_interval: float) -> ResponseScanner:
    return ResponseScanner(sink, abort, poll_interval=poll_interval)


@pytest.fixture
def fake_shell() -> Iterator[Callable[..., FakeShell]]:
    """Factory that starts a FakeShell and joins it at teardown."""
    started: list[FakeShell] = []

    def _start(sock: socket.socket, **kwargs: object) -> FakeShell:
        shell = FakeShell(sock, **kwargs)  # type: ignore[arg-type]
        shell.start()
        started.append(shell)
        return shell

    yield _start
    for shell in started:
        shell.join(timeout=5)
