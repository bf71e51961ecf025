# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for the middleware chain, ErrorMiddleware and LoggingMiddleware."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

from portfolio_site.exceptions import HTTPMethodNotAllowed, HTTPNotFound
from portfolio_site.middleware import MIDDLEWARE_REGISTRY, middleware_chain
from portfolio_site.middleware.errors import ErrorMiddleware
from portfolio_site.middleware.logging import LoggingMiddleware


def raising_app(exc: Exception) -> Any:
    async def app(scope: Any, receive: Any, send: Any) -> None:
        raise exc

    return app


async def ok_app(scope: Any, receive: Any, send: Any) -> None:
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"ok"})


class TestRegistry:
    """Registration and chain building."""

    def test_registered(self) -> None:
        assert MIDDLEWARE_REGISTRY["errors"] is ErrorMiddleware
        assert MIDDLEWARE_REGISTRY["logging"] is LoggingMiddleware

    def test_default_chain_order(self) -> None:
        chain = middleware_chain(ok_app)
        assert isinstance(chain, ErrorMiddleware)
        assert isinstance(chain.app, LoggingMiddleware)
        assert chain.app.app is ok_app

    def test_disable_logging(self) -> None:
        chain = middleware_chain(ok_app, enabled={"logging": "off"})
        assert isinstance(chain, ErrorMiddleware)
        assert chain.app is ok_app

    def test_options_forwarded(self, tmp_path: Path) -> None:
        chain = middleware_chain(
            ok_app, options={"errors": {"debug": True, "not_found_page": tmp_path / "e.html"}}
        )
        assert chain.debug is True
        assert chain.not_found_page == tmp_path / "e.html"


class TestErrorMiddleware:
    """Exception to response conversion."""

    @pytest.mark.asyncio
    async def test_passthrough(self, call: Any) -> None:
        response = await call(ErrorMiddleware(ok_app), "GET", "/")
        assert response.status == 200
        assert response.body == b"ok"

    @pytest.mark.asyncio
    async def test_not_found_plain(self, call: Any) -> None:
        response = await call(ErrorMiddleware(raising_app(HTTPNotFound())), "GET", "/x")
        assert response.status == 404
        assert response.body == b"404 Not Found"

    @pytest.mark.asyncio
    async def test_not_found_page(self, call: Any, tmp_path: Path) -> None:
        page = tmp_path / "error.html"
        page.write_text("<h1>gone</h1>")
        app = ErrorMiddleware(raising_app(HTTPNotFound()), not_found_page=page)
        response = await call(app, "GET", "/x")
        assert response.status == 404
        assert response.body == b"<h1>gone</h1>"
        assert response.headers[b"content-type"] == b"text/html; charset=utf-8"

    @pytest.mark.asyncio
    async def test_not_found_head_has_no_body(self, call: Any) -> None:
        response = await call(ErrorMiddleware(raising_app(HTTPNotFound())), "HEAD", "/x")
        assert response.status == 404
        assert response.body == b""

    @pytest.mark.asyncio
    async def test_method_not_allowed(self, call: Any) -> None:
        response = await call(ErrorMiddleware(raising_app(HTTPMethodNotAllowed())), "POST", "/")
        assert response.status == 405
        assert response.headers[b"allow"] == b"GET, HEAD"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic_500(
        self, call: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        app = ErrorMiddleware(raising_app(ValueError("/srv/site/secret path")))
        with caplog.at_level(logging.ERROR, logger="portfolio_site.errors"):
            response = await call(app, "GET", "/")
        assert response.status == 500
        assert response.body == b"500 Internal Server Error"
        assert any(r.exc_info for r in caplog.records)

    @pytest.mark.asyncio
    async def test_debug_includes_traceback(self, call: Any) -> None:
        app = ErrorMiddleware(raising_app(ValueError("boom")), debug=True)
        response = await call(app, "GET", "/")
        assert response.status == 500
        assert b"Traceback" in response.body

    @pytest.mark.asyncio
    async def test_error_after_start_sends_nothing_more(self, call: Any) -> None:
        async def half_app(scope: Any, receive: Any, send: Any) -> None:
            await send({"type": "http.response.start", "status": 200, "headers": []})
            raise RuntimeError("disk went away")

        response = await call(ErrorMiddleware(half_app), "GET", "/")
        assert [m["type"] for m in response.messages] == ["http.response.start"]

    @pytest.mark.asyncio
    async def test_non_http_passthrough(self) -> None:
        seen: list[str] = []

        async def app(scope: Any, receive: Any, send: Any) -> None:
            seen.append(scope["type"])

        await ErrorMiddleware(app)({"type": "lifespan"}, None, None)
        assert seen == ["lifespan"]


class TestLoggingMiddleware:
    """Access log lines."""

    @pytest.mark.asyncio
    async def test_logs_request_and_status(
        self, call: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="portfolio_site.access"):
            await call(LoggingMiddleware(ok_app), "GET", "/dijkstra")
        messages = [r.getMessage() for r in caplog.records]
        assert "<- GET /dijkstra from 127.0.0.1" in messages
        assert any(m.startswith("-> GET /dijkstra 200 (") for m in messages)

    @pytest.mark.asyncio
    async def test_logs_http_error_status(
        self, call: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        app = LoggingMiddleware(raising_app(HTTPNotFound()))
        with caplog.at_level(logging.INFO, logger="portfolio_site.access"):
            with pytest.raises(HTTPNotFound):
                await call(app, "GET", "/nope")
        assert any(r.getMessage().startswith("-> GET /nope 404 (") for r in caplog.records)

    @pytest.mark.asyncio
    async def test_logs_unexpected_error(
        self, call: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        app = LoggingMiddleware(raising_app(RuntimeError("boom")))
        with caplog.at_level(logging.INFO, logger="portfolio_site.access"):
            with pytest.raises(RuntimeError):
                await call(app, "GET", "/")
        assert any(r.levelno == logging.ERROR for r in caplog.records)
