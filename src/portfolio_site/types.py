# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""ASGI type aliases used across portfolio-site.

The site server speaks plain ASGI to uvicorn. Scope and Message stay generic
mappings because uvicorn adds server-specific keys (``client``, ``server``,
``state``) that a TypedDict would have to enumerate.

Minimal usage::

    from portfolio_site.types import Scope, Receive, Send

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        await send({"type": "http.response.start", "status": 204, "headers": []})
        await send({"type": "http.response.body", "body": b""})
"""

from typing import Any, Awaitable, Callable, MutableMapping

__all__ = ["Scope", "Message", "Receive", "Send", "ASGIApp"]

# Connection metadata
Scope = MutableMapping[str, Any]

# Event sent or received over the connection
Message = MutableMapping[str, Any]

Receive = Callable[[], Awaitable[Message]]

Send = Callable[[Message], Awaitable[None]]

ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]
