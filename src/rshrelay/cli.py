"""Command-line interface for rshrelay.

Parses the listening port, loads configuration, installs the shutdown
signal handlers and serves remote shell connections until aborted.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rshrelay import __version__

logger = logging.getLogger(__name__)

FOOTER = "Single-client command relay for remote shell agents"

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    # -h is handled by hand so that it exits with a failure status.
    parser = argparse.ArgumentParser(
        prog="rshrelay",
        description=FOOTER,
        add_help=False,
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        default=None,
        help="Specify the port to bind the server",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/rshrelay.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "-h", "--help",
        action="store_true",
        help="Show this message",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace | None:
    """Parse command-line arguments.

    Returns None on any usage error: ``-h``, a missing or out-of-range
    port, or arguments argparse itself rejects.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        return None

    if args.help or args.port is None or not 0 < args.port < 65536:
        return None
    return args


def usage(progname: str = "rshrelay") -> str:
    return (
        f"rshrelay v{__version__}\n{FOOTER}\n"
        f"Usage: {progname} [OPTIONS]\n\n"
        "OPTIONS\n"
        " -p <port> Specify the port to bind the server\n"
        " -c <path> Path to YAML configuration file\n"
        " -v        Enable debug logging\n"
        " -h        Show this message\n"
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the rshrelay CLI. Returns the exit status."""
    args = parse_args(argv)
    if args is None:
        sys.stderr.write(usage())
        return EXIT_FAILURE

    from rshrelay.config.settings import load_settings
    from rshrelay.domain.errors import SetupError
    from rshrelay.session.abort import AbortToken, install_signal_handlers
    from rshrelay.session.acceptor import ConnectionAcceptor
    from rshrelay.session.operator import OperatorInput
    from rshrelay.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    abort = AbortToken()
    install_signal_handlers(abort)

    operator = OperatorInput(
        sys.stdin.buffer, abort, poll_interval=settings.server.poll_interval
    )
    acceptor = ConnectionAcceptor(
        settings, args.port, abort, operator, sys.stdout.buffer
    )

    try:
        with acceptor:
            acceptor.serve()
    except SetupError as e:
        logger.critical("%s", e)
        return EXIT_FAILURE

    logger.info("Exiting...")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
