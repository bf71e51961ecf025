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
Static file responses.

Sends a file over ASGI with the headers a browser needs to render or
download it. Path resolution and traversal checks are not done here: callers
pass a Path that a route already resolved (see ``routes.py``).

Headers on success:
- content-type: from the file extension via mimetypes, ``charset=utf-8``
  appended for text types and JavaScript, ``application/octet-stream``
  when unknown
- content-length: file size at open time
- etag: md5 of size and mtime, so it changes when the file is replaced
- cache-control: configurable, default ``public, max-age=3600``

The body is streamed in CHUNK_SIZE pieces with ``more_body`` so large assets
(the résumé PDF, photos) are never held in memory whole.

Functions:
    guess_content_type(path) -> str
    open_file(path) -> FileResponse
    send_text(send, status, text, headers=None, content_type=...) -> None
"""

from __future__ import annotations

import hashlib
import mimetypes
import os
from pathlib import Path
from typing import BinaryIO

from .types import Send

__all__ = ["FileResponse", "guess_content_type", "open_file", "send_text", "CHUNK_SIZE"]

CHUNK_SIZE = 64 * 1024

DEFAULT_CACHE_CONTROL = "public, max-age=3600"

# Ensure common types are registered regardless of the host's mime.types
mimetypes.add_type("application/javascript", ".js")
mimetypes.add_type("application/javascript", ".mjs")
mimetypes.add_type("text/css", ".css")
mimetypes.add_type("image/svg+xml", ".svg")
mimetypes.add_type("image/webp", ".webp")
mimetypes.add_type("image/x-icon", ".ico")
mimetypes.add_type("application/json", ".json")
mimetypes.add_type("application/pdf", ".pdf")
mimetypes.add_type("text/html", ".html")
mimetypes.add_type("text/html", ".htm")


def guess_content_type(path: Path) -> str:
    """Return the Content-Type header value for a file path."""
    content_type, _ = mimetypes.guess_type(path.name)
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/") or content_type == "application/javascript":
        return f"{content_type}; charset=utf-8"
    return content_type


class FileResponse:
    """
    An opened file ready to be sent.

    Opening happens in ``open_file`` before anything is sent, so a file that
    cannot be read fails while the request can still get a proper error
    response.

    Attributes:
        path: File being sent.
        size: Size in bytes at open time (the Content-Length).
        content_type: Content-Type header value.
        etag: Quoted entity tag.
    """

    __slots__ = ("path", "size", "content_type", "etag", "cache_control", "status", "_file")

    def __init__(
        self,
        path: Path,
        file: BinaryIO,
        *,
        status: int = 200,
        cache_control: str = DEFAULT_CACHE_CONTROL,
    ) -> None:
        stat = os.fstat(file.fileno())
        self.path = path
        self.size = stat.st_size
        self.content_type = guess_content_type(path)
        self.etag = '"' + hashlib.md5(f"{stat.st_mtime_ns}-{stat.st_size}".encode()).hexdigest() + '"'
        self.cache_control = cache_control
        self.status = status
        self._file = file

    @property
    def headers(self) -> list[tuple[bytes, bytes]]:
        return [
            (b"content-type", self.content_type.encode("latin-1")),
            (b"content-length", str(self.size).encode()),
            (b"etag", self.etag.encode()),
            (b"cache-control", self.cache_control.encode("latin-1")),
        ]

    async def send(self, send: Send, include_body: bool = True) -> None:
        """Send start message then the body in chunks. Closes the file."""
        try:
            await send({
                "type": "http.response.start",
                "status": self.status,
                "headers": self.headers,
            })
            if not include_body:
                await send({"type": "http.response.body", "body": b""})
                return

            remaining = self.size
            while True:
                chunk = self._file.read(min(CHUNK_SIZE, remaining)) if remaining > 0 else b""
                remaining -= len(chunk)
                more_body = bool(chunk) and remaining > 0
                await send({"type": "http.response.body", "body": chunk, "more_body": more_body})
                if not more_body:
                    break
        finally:
            self.close()

    def close(self) -> None:
        self._file.close()

    def __repr__(self) -> str:
        return f"FileResponse(path={str(self.path)!r}, size={self.size})"


def open_file(
    path: Path, *, status: int = 200, cache_control: str = DEFAULT_CACHE_CONTROL
) -> FileResponse:
    """Open path for sending.

    Raises:
        OSError: the file cannot be opened (missing, permission denied,
            is a directory).
    """
    file = path.open("rb")
    try:
        return FileResponse(path, file, status=status, cache_control=cache_control)
    except OSError:
        file.close()
        raise


async def send_text(
    send: Send,
    status: int,
    text: str,
    headers: list[tuple[str, str]] | None = None,
    content_type: str = "text/plain; charset=utf-8",
    include_body: bool = True,
) -> None:
    """Send a small text response (error bodies)."""
    body = text.encode("utf-8")
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", content_type.encode("latin-1")),
        (b"content-length", str(len(body)).encode()),
    ]
    if headers:
        raw_headers.extend(
            (k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers
        )
    await send({"type": "http.response.start", "status": status, "headers": raw_headers})
    await send({"type": "http.response.body", "body": body if include_body else b""})
