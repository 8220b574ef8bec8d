"""Framing protocol between rshrelay and the remote shell.

Public API:
    frame_command -- Amend an operator line so the remote prints the sentinel
    ResponseScanner -- Echo remote output until the sentinel or a timeout
"""

from rshrelay.protocol.framer import frame_command
from rshrelay.protocol.scanner import ResponseScanner

__all__ = ["ResponseScanner", "frame_command"]
