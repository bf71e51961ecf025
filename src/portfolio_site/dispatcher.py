# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Dispatcher - innermost ASGI app, maps a request to a file and sends it.

Request flow:
    ErrorMiddleware -> LoggingMiddleware -> SiteDispatcher
        -> RouteTable.match(path)        404 on traversal or no match
        -> method check                  405 on a matched route
        -> route.resolve(match)          404 (asset) / 500 (page)
        -> open_file(path).send(send)    200

All failures are raised as HTTPException subclasses and turned into
responses by ErrorMiddleware. The dispatcher holds no per-request state, so
concurrent requests share only the immutable route table.
"""

from __future__ import annotations

import logging

from .exceptions import HTTPMethodNotAllowed, HTTPNotFound, InternalResourceError
from .routes import PageRoute, RouteTable
from .static import DEFAULT_CACHE_CONTROL, open_file
from .types import Receive, Scope, Send

__all__ = ["SiteDispatcher"]

logger = logging.getLogger("portfolio_site.dispatcher")


class SiteDispatcher:
    """Serve files for the routes of a RouteTable.

    Attributes:
        routes: The fixed route table.
        cache_control: Cache-Control header value for served files.
    """

    __slots__ = ("routes", "cache_control")

    def __init__(self, routes: RouteTable, cache_control: str = DEFAULT_CACHE_CONTROL) -> None:
        self.routes = routes
        self.cache_control = cache_control

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        method = scope.get("method", "GET")
        match = self.routes.match(scope.get("path", "/"))
        route = match.route

        if method not in route.allowed_methods:
            raise HTTPMethodNotAllowed(route.allowed_methods)

        file_path = route.resolve(match)

        try:
            response = open_file(file_path, cache_control=self.cache_control)
        except OSError as e:
            if isinstance(route, PageRoute):
                raise InternalResourceError(file_path, reason=e.strerror or str(e)) from e
            raise HTTPNotFound() from None

        try:
            await response.send(send, include_body=(method == "GET"))
        except OSError as e:
            # Client closed the connection mid-response.
            logger.debug(f"Response for {scope.get('path')} aborted: {e!r}")

    def __repr__(self) -> str:
        return f"SiteDispatcher(routes={len(self.routes)})"
