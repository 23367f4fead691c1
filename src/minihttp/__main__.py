"""
=============================================================================
COMMAND LINE INTERFACE
=============================================================================

    python -m minihttp                       # 127.0.0.1:4221, threaded
    python -m minihttp --port 8080           # custom port
    python -m minihttp --sequential          # one connection at a time
    python -m minihttp -l DEBUG --log-format json

Defaults come from the environment (see ServerConfig.from_env), flags
override them.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import LOG_FORMATS, ServerConfig
from .server import HTTPServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal HTTP/1.1 server over raw TCP sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Routes:
  /                 200 OK, empty body
  /user-agent       200 OK, body = User-Agent request header
  /echo/<text>      200 OK, body = <text>
  anything else     404 Not Found
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=defaults.timeout,
        help="Per-connection socket timeout in seconds (default: none)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=defaults.max_workers,
        help=f"Maximum worker threads (default: {defaults.max_workers})",
    )

    parser.add_argument(
        "--sequential",
        action="store_true",
        default=not defaults.is_threaded,
        help="Handle one connection at a time instead of using a thread pool",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})",
    )

    parser.add_argument(
        "--log-format",
        choices=list(LOG_FORMATS),
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}",
    )

    return parser


def config_from_args(argv=None) -> ServerConfig:
    """Build a ServerConfig from environment defaults and command line flags."""
    defaults = ServerConfig.from_env()
    args = build_parser(defaults).parse_args(argv)

    return ServerConfig(
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        concurrency="sequential" if args.sequential else "threaded",
        min_workers=min(defaults.min_workers, args.workers),
        max_workers=args.workers,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv=None) -> int:
    try:
        server = HTTPServer(config_from_args(argv))
    except ValueError as e:
        print(f"minihttp: invalid configuration: {e}", file=sys.stderr)
        return 2

    server.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
