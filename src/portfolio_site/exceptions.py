# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exception classes for the portfolio site server.

Two families live here and they never mix:

1. Startup errors - raised before the server accepts any connection.
   They are fatal: the CLI logs them and exits with status 1.

   - StartupError: generic startup failure (e.g. missing site directory)
   - BindError: the listening socket could not be bound

2. HTTP errors - raised while handling one request. ErrorMiddleware turns
   them into a response for that request only; other requests in flight are
   unaffected.

   - HTTPException: base class, carries status_code, detail, headers
   - HTTPNotFound: 404, unmatched path, traversal attempt or missing asset
   - HTTPMethodNotAllowed: 405, wrong verb on a matched route
   - InternalResourceError: 500, the file behind a page route is missing or
     unreadable. This is a packaging defect, not a client error.

The ``detail`` of an HTTP error is what the client sees, so it must never
contain filesystem paths. InternalResourceError keeps the offending path on a
separate attribute for logging.

Example:
    >>> raise HTTPNotFound()
    >>> raise HTTPMethodNotAllowed(allowed=("GET", "HEAD"))
    >>> raise BindError("0.0.0.0", 80, PermissionError(13, "Permission denied"))
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "StartupError",
    "BindError",
    "HTTPException",
    "HTTPNotFound",
    "HTTPMethodNotAllowed",
    "InternalResourceError",
]


class StartupError(Exception):
    """Fatal error raised before the server starts accepting connections."""


class BindError(StartupError):
    """
    The listening socket could not be bound.

    Attributes:
        host: Address the bind was attempted on.
        port: Port the bind was attempted on.
        reason: The underlying OSError, or OverflowError for a port
            outside 0..65535.
    """

    def __init__(self, host: str, port: int, reason: OSError | OverflowError) -> None:
        self.host = host
        self.port = port
        self.reason = reason
        detail = getattr(reason, "strerror", None) or reason
        super().__init__(f"Cannot bind {host}:{port}: {detail}")

    def __repr__(self) -> str:
        return f"BindError(host={self.host!r}, port={self.port})"


class HTTPException(Exception):
    """
    HTTP exception with status code and detail.

    Raise this while handling a request to return an HTTP error response.
    ErrorMiddleware catches it and converts it to a response with the given
    status code, detail and headers.

    Attributes:
        status_code: HTTP status code (4xx or 5xx, not validated)
        detail: Error detail message, shown to the client
        headers: Extra response headers as list of tuples
    """

    def __init__(
        self,
        status_code: int,
        detail: str = "",
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
    ) -> None:
        """
        Initialize HTTP exception.

        Args:
            status_code: HTTP status code.
            detail: Error detail message (default: "").
            headers: Response headers as dict or list of tuples (default: None).
        """
        self.status_code = status_code
        self.detail = detail
        if headers is None:
            self.headers: list[tuple[str, str]] | None = None
        elif isinstance(headers, dict):
            self.headers = list(headers.items())
        else:
            self.headers = list(headers)
        super().__init__(detail)

    def __repr__(self) -> str:
        return f"HTTPException(status_code={self.status_code}, detail={self.detail!r})"


class HTTPNotFound(HTTPException):
    """HTTP 404 Not Found exception."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(404, detail=detail)


class HTTPMethodNotAllowed(HTTPException):
    """HTTP 405 Method Not Allowed exception with the Allow header set."""

    def __init__(
        self, allowed: tuple[str, ...] = ("GET", "HEAD"), detail: str = "Method Not Allowed"
    ) -> None:
        super().__init__(405, detail=detail, headers={"Allow": ", ".join(allowed)})
        self.allowed = allowed


class InternalResourceError(HTTPException):
    """HTTP 500 for a page route whose backing file is missing or unreadable."""

    def __init__(self, path: Path, reason: str = "missing") -> None:
        super().__init__(500, detail="Internal Server Error")
        self.path = path
        self.reason = reason

    def __repr__(self) -> str:
        return f"InternalResourceError(path={str(self.path)!r}, reason={self.reason!r})"
