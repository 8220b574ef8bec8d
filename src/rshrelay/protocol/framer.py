"""Command framing for the remote shell.

The remote endpoint is a shell that executes every line it receives and
gives no structured indication of where a command's output ends. Each
operator line is therefore amended so the shell prints two control
bytes, ETX (0x03) then EOT (0x04), as soon as the command finishes::

    b"ls\\n"  ->  b'ls ; printf "\\x03\\x04"\\n'
    b"\\n"    ->  b'printf "\\x03\\x04"\\n'

``;`` is used instead of ``&&`` so the sentinel is printed whether or
not the command succeeded.
"""

from __future__ import annotations

import logging

from rshrelay.domain.errors import FramingError
from rshrelay.domain.models import FramedCommand

logger = logging.getLogger(__name__)

END_OF_TEXT = 0x03
END_OF_TRANSMISSION = 0x04
CMD_SEPARATOR = b" ; "
SENTINEL_INSTRUCTION = b'printf "' + bytes([END_OF_TEXT, END_OF_TRANSMISSION]) + b'"'
NEWLINE = b"\n"

DEFAULT_MAX_COMMAND_LENGTH = 1024


def frame_command(
    line: bytes,
    max_length: int = DEFAULT_MAX_COMMAND_LENGTH,
) -> FramedCommand:
    """Rewrite an operator line so the remote shell emits the sentinel.

    Args:
        line: Raw operator input, normally including its trailing newline.
              A final line without a newline keeps all of its bytes.
        max_length: Largest framed payload, in bytes, that may be sent.

    Returns:
        The framed command ready for transmission.

    Raises:
        FramingError: If the line is empty or the framed payload would
            exceed ``max_length``. Nothing is truncated.
    """
    if not line:
        raise FramingError("Cannot frame an empty line")

    if line == NEWLINE:
        payload = SENTINEL_INSTRUCTION + NEWLINE
        sentinel_only = True
    else:
        command = line[:-1] if line.endswith(NEWLINE) else line
        payload = command + CMD_SEPARATOR + SENTINEL_INSTRUCTION + NEWLINE
        sentinel_only = False

    if len(payload) > max_length:
        raise FramingError(
            f"Framed command is {len(payload)} bytes, limit is {max_length} "
            f"(longest command is {max_command_bytes(max_length)} bytes)",
            length=len(payload),
            limit=max_length,
        )

    logger.debug("Framed %d-byte line into %d bytes", len(line), len(payload))
    return FramedCommand(payload=payload, length=len(payload), sentinel_only=sentinel_only)


def max_command_bytes(max_length: int = DEFAULT_MAX_COMMAND_LENGTH) -> int:
    """Longest operator command (without newline) that still fits once framed."""
    return max_length - len(CMD_SEPARATOR) - len(SENTINEL_INSTRUCTION) - len(NEWLINE)
