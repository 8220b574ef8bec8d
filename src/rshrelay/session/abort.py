"""Process-wide cancellation token set by shutdown signals.

Every blocking wait in rshrelay (accept, remote bytes, operator input)
waits in slices of at most ``poll_interval`` seconds and checks the token
between slices, so a signal ends the current wait within one slice.
"""

from __future__ import annotations

import signal
import threading

ABORT_SIGNALS = ("SIGINT", "SIGTERM", "SIGQUIT")


class AbortToken:
    """A settable, never-reset flag shared by all blocking waits."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def set(self) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()


def install_signal_handlers(token: AbortToken) -> list[signal.Signals]:
    """Route SIGINT, SIGTERM and SIGQUIT to ``token``.

    Signals the platform does not define are skipped.

    Returns:
        The signals that were installed.
    """

    def _handler(signum: int, frame: object) -> None:
        token.set()

    installed = []
    for name in ABORT_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        signal.signal(signum, _handler)
        installed.append(signum)
    return installed
