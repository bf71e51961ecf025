# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
portfolio-site CLI entry point.

Usage:
    portfolio-site serve                     # bundled site, PORT or 8080
    portfolio-site serve ./site --port 9000  # override site and port
    python -m portfolio_site serve

Exit codes:
    0  graceful shutdown (SIGINT/SIGTERM)
    1  startup failure (bind error, missing site directory) or bad usage
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import Any

from .exceptions import StartupError

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    from . import __version__

    parser = argparse.ArgumentParser(
        prog="portfolio-site", description="Serve the portfolio site"
    )
    parser.add_argument("--version", "-v", action="version", version=f"portfolio-site {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    serve = subparsers.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("site_dir", nargs="?", default=None, help="Site directory (default: bundled site)")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: PORT or 8080)")
    serve.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    serve.add_argument("--debug", action="store_true", default=None, help="Tracebacks in 500 responses")
    serve.add_argument(
        "--no-access-log",
        dest="access_log",
        action="store_false",
        default=None,
        help="Do not log requests (default: PORTFOLIO_SITE_ACCESS_LOG or on)",
    )
    return parser


def _interrupt(signum: int, frame: Any) -> None:
    """SIGTERM handler: shut down the same way as Ctrl-C."""
    raise KeyboardInterrupt


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the server. Returns the process exit code."""
    from .server import start
    from .server_config import ServerConfig

    config = ServerConfig(
        site_dir=args.site_dir,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        debug=args.debug,
        access_log=args.access_log,
    )
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    print("portfolio-site starting...", flush=True)
    print(f"Site dir: {config.site_dir}", flush=True)
    print(f"Server: http://{config.host}:{config.port}", flush=True)
    print(flush=True)

    # uvicorn re-raises the signal it caught once it has shut down.
    previous = signal.signal(signal.SIGTERM, _interrupt)
    try:
        start(config)
    except StartupError as e:
        logging.getLogger("portfolio_site.server").error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nShutdown.")
    finally:
        signal.signal(signal.SIGTERM, previous)

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command != "serve":
        parser.print_help()
        return 1

    return cmd_serve(args)


if __name__ == "__main__":
    sys.exit(main())
