# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Logging Middleware - HTTP access logging.

Log format:
    Request:  "<- GET /dijkstra from 192.168.1.1"
    Response: "-> GET /dijkstra 200 (1.5ms)"
    Error:    "-> GET /dijkstra ERROR: ... (1.5ms)"

Options:
    logger_name (str): Logger name. Default: "portfolio_site.access".
    level (str): Log level for request/response lines. Default: "INFO".
    include_query (bool): Include query string in logged path. Default: True.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, MutableMapping

from . import BaseMiddleware
from ..exceptions import HTTPException

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send


class LoggingMiddleware(BaseMiddleware):
    """Access logging middleware for HTTP requests.

    Sits inside ErrorMiddleware, so error responses are logged with their
    final status.

    Class Attributes:
        middleware_name: "logging"
        middleware_order: 200
        middleware_default: True
    """

    middleware_name = "logging"
    middleware_order = 200
    middleware_default = True

    __slots__ = ("logger", "level", "include_query")

    def __init__(
        self,
        app: ASGIApp,
        logger_name: str = "portfolio_site.access",
        level: str = "INFO",
        include_query: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        self.logger = logging.getLogger(logger_name)
        self.level = getattr(logging, level.upper(), logging.INFO)
        self.include_query = include_query

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Log request arrival and completion with timing.

        Exceptions are logged at ERROR and re-raised for ErrorMiddleware.
        """
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        method = scope.get("method", "?")
        path = scope.get("path", "/")
        query = scope.get("query_string", b"").decode("latin-1")

        request_info = f"{method} {path}"
        if self.include_query and query:
            request_info += f"?{query}"

        client = scope.get("client")
        client_ip = client[0] if client else "unknown"

        self.logger.log(self.level, f"<- {request_info} from {client_ip}")

        status_code: int = 0

        async def send_with_logging(message: MutableMapping[str, Any]) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, send_with_logging)
        except HTTPException as e:
            duration = (time.perf_counter() - start_time) * 1000
            self.logger.log(self.level, f"-> {request_info} {e.status_code} ({duration:.1f}ms)")
            raise
        except Exception as e:
            duration = (time.perf_counter() - start_time) * 1000
            self.logger.error(f"-> {request_info} ERROR: {e!r} ({duration:.1f}ms)")
            raise

        duration = (time.perf_counter() - start_time) * 1000
        self.logger.log(self.level, f"-> {request_info} {status_code} ({duration:.1f}ms)")


if __name__ == "__main__":
    pass
