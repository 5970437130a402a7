"""Command-line entry for localserver."""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn

from . import run_server


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the localserver CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="localserver",
        description="Local control server with health supervision",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m localserver                    # Start server on http://localhost:3000
  python -m localserver --port 8080        # Start server on port 8080
  python -m localserver --debug            # Verbose diagnostics
        """,
    )

    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port number for the web server (default: 3000, or LOCALSERVER_PORT)",
    )
    parser.add_argument(
        "--host",
        metavar="HOST",
        help="Host name used in the advertised URL (default: localhost)",
    )
    parser.add_argument(
        "--bind",
        metavar="ADDRESS",
        help="Interface address to bind (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def main() -> NoReturn:
    """Run the localserver CLI."""
    parser = _create_parser()
    args = parser.parse_args()
    sys.exit(run_server(args))


if __name__ == "__main__":
    main()
