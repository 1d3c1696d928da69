"""
Command-line entry point: ``python -m filegate`` or ``filegate``.

Options not given on the command line fall back to FILEGATE_* environment
variables, then to the ServerConfig defaults.
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import LOG_FORMATS, LOG_LEVELS, ServerConfig
from .server import FileServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filegate",
        description="Authenticated static file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m filegate                          # serve ./wwwroot on 127.0.0.1:8080
  python -m filegate --root /srv/files        # serve another directory
  python -m filegate --host 0.0.0.0 -p 3000   # all interfaces, port 3000
  python -m filegate --log-format json        # JSON access log
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--host", "-H", help="Host to bind to (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on (default: 8080)")

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument("--root", "-r", help="Directory to serve (default: ./wwwroot)")

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        help="Access log format (default: text)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"FileGate {__version__}",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment-based config with command-line values layered on top."""
    config = ServerConfig.from_env()

    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.root is not None:
        config.root_dir = args.root
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)

    try:
        server = FileServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
