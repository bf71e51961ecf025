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

"""portfolio-site - static portfolio pages and assets served over ASGI.

Main components:
    SiteServer: ASGI entry point (lifespan + middleware + dispatcher)
    start: bind the port and run under uvicorn
    ServerConfig: port/host/site directory from environment and CLI
    RouteTable: fixed, ordered routes (pages first, then asset prefixes)

Usage:
    from portfolio_site import ServerConfig, start

    start(ServerConfig())
"""

__version__ = "0.1.0"

from .exceptions import (
    BindError,
    HTTPException,
    HTTPMethodNotAllowed,
    HTTPNotFound,
    InternalResourceError,
    StartupError,
)
from .routes import (
    AssetRoute,
    PageRoute,
    Route,
    RouteMatch,
    RouteTable,
    default_routes,
    normalize_path,
)
from .server_config import ServerConfig
from .dispatcher import SiteDispatcher
from .lifespan import SiteLifespan
from .server import SiteServer, bind_socket, start
from .types import ASGIApp, Message, Receive, Scope, Send

__all__ = [
    # Server
    "SiteServer",
    "SiteDispatcher",
    "SiteLifespan",
    "ServerConfig",
    "bind_socket",
    "start",
    # Routing
    "Route",
    "PageRoute",
    "AssetRoute",
    "RouteMatch",
    "RouteTable",
    "default_routes",
    "normalize_path",
    # Exceptions
    "StartupError",
    "BindError",
    "HTTPException",
    "HTTPNotFound",
    "HTTPMethodNotAllowed",
    "InternalResourceError",
    # ASGI types
    "ASGIApp",
    "Message",
    "Receive",
    "Scope",
    "Send",
]
