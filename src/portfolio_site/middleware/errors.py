# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Error handling middleware.

Catches exceptions raised while handling one request and converts them to a
response for that request only.

Exception handling:
    - HTTPNotFound: 404, body is the site's error page when configured,
      plain "404 Not Found" otherwise
    - InternalResourceError: 500, logged at ERROR with the missing file
    - HTTPException: status code with detail message and extra headers
    - Exception: 500 Internal Server Error, logged with traceback

Response bodies never carry filesystem paths or tracebacks unless ``debug``
is on.

If the response has already started when the exception arrives, nothing more
can be sent: the error is logged and the request ends.
"""

from __future__ import annotations

import logging
import traceback
from pathlib import Path
from typing import TYPE_CHECKING, Any

from . import BaseMiddleware
from ..exceptions import HTTPException, HTTPNotFound, InternalResourceError
from ..static import open_file, send_text

if TYPE_CHECKING:
    from ..types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("portfolio_site.errors")


class ErrorMiddleware(BaseMiddleware):
    """Error handling middleware for HTTP requests.

    Attributes:
        debug: If True, include stack traces in 500 error responses.
        not_found_page: HTML file used as the 404 body, if it exists.

    Class Attributes:
        middleware_name: "errors"
        middleware_order: 100 - outermost, catches everything.
        middleware_default: True
    """

    middleware_name = "errors"
    middleware_order = 100
    middleware_default = True

    __slots__ = ("debug", "not_found_page")

    def __init__(
        self,
        app: ASGIApp,
        debug: bool = False,
        not_found_page: str | Path | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        self.debug = debug
        self.not_found_page = Path(not_found_page) if not_found_page else None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = False

        async def send_tracking(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        include_body = scope.get("method", "GET") != "HEAD"

        try:
            await self.app(scope, receive, send_tracking)
        except Exception as e:
            if started:
                logger.exception(
                    f"Error after response started for {scope.get('method')} {scope.get('path')}"
                )
                return
            if isinstance(e, HTTPNotFound):
                await self._send_not_found(send, e, include_body)
            elif isinstance(e, InternalResourceError):
                logger.error(
                    f"Missing page resource for {scope.get('path')}: {e.path} ({e.reason})"
                )
                await self._send_http_error(send, e, include_body)
            elif isinstance(e, HTTPException):
                await self._send_http_error(send, e, include_body)
            else:
                logger.exception(f"Unhandled error for {scope.get('method')} {scope.get('path')}")
                await self._send_server_error(send, include_body)

    async def _send_not_found(self, send: Send, exc: HTTPNotFound, include_body: bool) -> None:
        """Send 404 using the error page if available."""
        if self.not_found_page is not None and self.not_found_page.is_file():
            try:
                response = open_file(self.not_found_page, status=404, cache_control="no-cache")
            except OSError:
                logger.warning(f"Cannot read error page {self.not_found_page}")
            else:
                await response.send(send, include_body=include_body)
                return
        await self._send_http_error(send, exc, include_body)

    async def _send_http_error(self, send: Send, exc: HTTPException, include_body: bool) -> None:
        """Send '<status> <detail>' as text/plain with exc.headers appended."""
        body = f"{exc.status_code} {exc.detail}" if exc.detail else str(exc.status_code)
        await send_text(send, exc.status_code, body, headers=exc.headers, include_body=include_body)

    async def _send_server_error(self, send: Send, include_body: bool) -> None:
        """Send 500, with traceback only in debug mode."""
        if self.debug:
            body = f"500 Internal Server Error\n\n{traceback.format_exc()}"
        else:
            body = "500 Internal Server Error"
        await send_text(send, 500, body, include_body=include_body)


if __name__ == "__main__":
    pass
