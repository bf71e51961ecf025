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
ASGI Lifespan Management.

SiteLifespan answers the ASGI lifespan protocol for SiteServer. On startup
it checks every page route's file and logs a warning for each one that is
missing. Startup does not fail on a missing page: the route answers 500 and
every other route stays servable.

Definition::

    class SiteLifespan:
        def __init__(self, server: SiteServer)
        async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None
        async def startup(self) -> None
        async def shutdown(self) -> None
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .routes import PageRoute
from .types import Receive, Scope, Send

if TYPE_CHECKING:
    from .server import SiteServer

__all__ = ["SiteLifespan"]


class SiteLifespan:
    """ASGI Lifespan handler for SiteServer.

    Attributes:
        server: The SiteServer instance this lifespan belongs to.
        missing_pages: Page files found missing at the last startup.
    """

    __slots__ = ("server", "missing_pages", "_logger", "_started")

    def __init__(self, server: SiteServer) -> None:
        self.server = server
        self.missing_pages: list[PageRoute] = []
        self._logger = logging.getLogger("portfolio_site.lifespan")
        self._started = False

    async def __call__(
        self, scope: Scope, receive: Receive, send: Send  # noqa: ARG002
    ) -> None:
        """Handle ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as e:
                    self._logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(e)})
                    return

            elif msg_type == "lifespan.shutdown":
                try:
                    await self.shutdown()
                except Exception:
                    self._logger.exception("Shutdown error")
                finally:
                    await send({"type": "lifespan.shutdown.complete"})
                return

    async def startup(self) -> None:
        """Log the route table and warn about missing page files."""
        self._logger.info(f"Site starting up with {len(self.server.routes)} routes")
        self.missing_pages = [
            route
            for route in self.server.routes
            if isinstance(route, PageRoute) and not route.file.is_file()
        ]
        for route in self.missing_pages:
            self._logger.warning(f"Page {route.path} has no file at {route.file}")
        self._started = True
        self._logger.info("Site started")

    async def shutdown(self) -> None:
        self._started = False
        self._logger.info("Site stopped")

    @property
    def started(self) -> bool:
        return self._started
