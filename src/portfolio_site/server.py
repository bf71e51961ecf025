# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Site Server - ASGI entry point and process startup for the portfolio site.

SiteServer is the ASGI application:
- Handles the ASGI lifespan protocol (SiteLifespan)
- Wraps SiteDispatcher in the middleware chain (errors -> logging)

``start(config)`` runs it:
- Builds the route table from the config's site directory (unless one is
  injected)
- Binds the listening socket itself, so a bind failure surfaces as
  BindError before anything else happens
- Hands the bound socket to uvicorn, which serves until SIGINT/SIGTERM

Usage:
    from portfolio_site import ServerConfig, start

    start(ServerConfig())            # PORT from the environment, default 8080

Architecture:
    SiteServer
        ├── routes: RouteTable (immutable)
        ├── dispatcher: ErrorMiddleware -> LoggingMiddleware -> SiteDispatcher
        └── lifespan: SiteLifespan
"""

from __future__ import annotations

import logging
import socket
from pathlib import Path

import uvicorn

from .dispatcher import SiteDispatcher
from .exceptions import BindError, StartupError
from .lifespan import SiteLifespan
from .middleware import middleware_chain
from .routes import ERROR_PAGE, PAGES_DIR, RouteTable, default_routes
from .server_config import ServerConfig
from .types import ASGIApp, Receive, Scope, Send

__all__ = ["SiteServer", "bind_socket", "start"]

logger = logging.getLogger("portfolio_site.server")


class SiteServer:
    """
    ASGI application serving a fixed route table.

    Attributes:
        routes: RouteTable used for every request.
        dispatcher: Middleware chain wrapping the SiteDispatcher.
        lifespan: SiteLifespan for startup/shutdown.
    """

    __slots__ = ("routes", "dispatcher", "lifespan")

    def __init__(
        self,
        routes: RouteTable,
        *,
        error_page: str | Path | None = None,
        debug: bool = False,
        access_log: bool = True,
    ) -> None:
        self.routes = routes
        self.lifespan = SiteLifespan(self)
        self.dispatcher: ASGIApp = middleware_chain(
            SiteDispatcher(routes),
            enabled={"logging": access_log},
            options={"errors": {"debug": debug, "not_found_page": error_page}},
        )

    @classmethod
    def from_config(cls, config: ServerConfig, routes: RouteTable | None = None) -> SiteServer:
        """Build a server for config's site directory.

        Raises:
            StartupError: the site directory does not exist.
        """
        site_dir = config.site_dir
        if not site_dir.is_dir():
            raise StartupError(f"Site directory does not exist: {site_dir}")
        if routes is None:
            routes = default_routes(site_dir)
        return cls(
            routes,
            error_page=site_dir / PAGES_DIR / ERROR_PAGE,
            debug=config.debug,
            access_log=config.access_log,
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self.lifespan(scope, receive, send)
        else:
            await self.dispatcher(scope, receive, send)

    def __repr__(self) -> str:
        return f"SiteServer(routes={len(self.routes)})"


def bind_socket(host: str, port: int) -> socket.socket:
    """Create a TCP socket bound to host:port.

    Raises:
        BindError: the address is in use or not available, the process
            lacks permission for the port, or the port is out of range.
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family=family, type=socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except (OSError, OverflowError) as e:
        sock.close()
        raise BindError(host, port, e) from e
    sock.set_inheritable(True)
    return sock


def start(config: ServerConfig, routes: RouteTable | None = None) -> None:
    """Bind config.host:config.port and serve until the process is signalled.

    Args:
        config: Server configuration, read once at process start.
        routes: Route table to serve. Defaults to ``default_routes`` for the
            config's site directory.

    Raises:
        StartupError: site directory missing, or uvicorn failed to start.
        BindError: the listening socket could not be bound.
    """
    server = SiteServer.from_config(config, routes)
    sock = bind_socket(config.host, config.port)

    logger.info(f"Serving {config.site_dir} on http://{config.host}:{config.port}")
    uvicorn_config = uvicorn.Config(
        server,
        host=config.host,
        port=config.port,
        lifespan="on",
        log_level=config.log_level.lower(),
        access_log=config.access_log,
    )
    uvicorn_server = uvicorn.Server(uvicorn_config)
    try:
        uvicorn_server.run(sockets=[sock])
    finally:
        sock.close()

    if not uvicorn_server.started:
        raise StartupError("Server failed to start")
    logger.info("Shutdown complete")


if __name__ == "__main__":
    start(ServerConfig())
