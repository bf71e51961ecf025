# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Shared fixtures: a temporary site tree and ASGI call helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Awaitable, Callable

import pytest

PAGE_BODIES = {
    "index.html": "<html><body>home</body></html>",
    "dijkstra.html": "<html><body>dijkstra</body></html>",
    "cmu-15-418-s24-final-project.html": "<html><body>cilk</body></html>",
}

ERROR_BODY = "<html><body>custom not found</body></html>"

# Larger than one CHUNK_SIZE so streaming sends several body messages.
PROFILE_JPG = b"\xff\xd8\xff\xe0" + bytes(range(256)) * 400


class MockSend:
    """Capture ASGI send messages for testing."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def start_message(self) -> dict[str, Any]:
        """Get the http.response.start message."""
        return self.messages[0]

    @property
    def body_messages(self) -> list[dict[str, Any]]:
        return [m for m in self.messages if m["type"] == "http.response.body"]

    @property
    def status(self) -> int:
        return self.start_message["status"]

    @property
    def headers(self) -> dict[bytes, bytes]:
        return dict(self.start_message["headers"])

    @property
    def body(self) -> bytes:
        """Complete body, concatenated from all body messages."""
        return b"".join(m.get("body", b"") for m in self.body_messages)


async def mock_receive() -> dict[str, Any]:
    """Mock receive callable (request bodies are never read)."""
    return {"type": "http.request", "body": b"", "more_body": False}


def make_scope(method: str = "GET", path: str = "/") -> dict[str, Any]:
    return {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "headers": [],
        "client": ("127.0.0.1", 54321),
    }


@pytest.fixture
def send() -> MockSend:
    return MockSend()


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """Create a site tree under tmp_path/site plus a file outside it."""
    site = tmp_path / "site"
    pages = site / "pages"
    pages.mkdir(parents=True)
    for name, body in PAGE_BODIES.items():
        (pages / name).write_text(body)
    (pages / "error.html").write_text(ERROR_BODY)

    (site / "img").mkdir()
    (site / "img" / "profile.jpg").write_bytes(PROFILE_JPG)
    (site / "img" / "icons").mkdir()
    (site / "img" / "icons" / "github.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (site / "js").mkdir()
    (site / "js" / "app.js").write_text("console.log('hi');")
    (site / "docs").mkdir()
    (site / "docs" / "resume.pdf").write_bytes(b"%PDF-1.4\n%%EOF\n")
    (site / "css").mkdir()
    (site / "css" / "style.css").write_text("body { margin: 0; }")

    (tmp_path / "secret.txt").write_text("do not serve")
    return site


@pytest.fixture
def call() -> Callable[..., Awaitable[MockSend]]:
    """Return a helper that runs an ASGI app for one request."""

    async def _call(app: Any, method: str = "GET", path: str = "/") -> MockSend:
        recorder = MockSend()
        await app(make_scope(method, path), mock_receive, recorder)
        return recorder

    return _call
