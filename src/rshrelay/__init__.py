"""rshrelay -- Single-client command relay for remote shell agents.

This package listens for one inbound connection from a remote shell,
forwards operator-typed command lines to it, and echoes the remote
output back to the terminal. Each command is framed so the remote shell
prints an end-of-response sentinel, which the scanner uses to detect
where one response ends and the next prompt begins.
"""

__version__ = "0.1.0"
