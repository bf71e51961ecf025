# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Route table - fixed mapping from URL path to file on disk.

Resolution happens in three steps, always in this order:

1. ``normalize_path`` splits the request path into segments, collapsing
   duplicate slashes. Any ``.`` or ``..`` segment is rejected here with
   HTTPNotFound, before a route is evaluated and before the filesystem is
   touched.
2. ``RouteTable.match`` evaluates each route's predicate top to bottom.
   The first match wins; no match is HTTPNotFound.
3. ``route.resolve(match)`` turns the match into a Path. AssetRoute
   re-checks the fully resolved path (symlinks followed) against its
   directory, so a symlink pointing outside the asset root is a 404 too.

Usage:
    table = default_routes(Path("./site"))
    match = table.match("/img/profile.jpg")
    file_path = match.route.resolve(match)

Layout expected by ``default_routes``::

    site/
        pages/index.html
        pages/dijkstra.html
        pages/cmu-15-418-s24-final-project.html
        pages/error.html          (optional, 404 body)
        img/ js/ css/ docs/       (asset roots)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, NamedTuple

from .exceptions import HTTPNotFound, InternalResourceError

__all__ = [
    "Route",
    "PageRoute",
    "AssetRoute",
    "RouteMatch",
    "RouteTable",
    "normalize_path",
    "default_routes",
    "PAGES",
    "ASSET_PREFIXES",
    "PAGES_DIR",
    "ERROR_PAGE",
]

PAGES: tuple[tuple[str, str], ...] = (
    ("/", "index.html"),
    ("/dijkstra", "dijkstra.html"),
    ("/cmu-15-418-s24-final-project", "cmu-15-418-s24-final-project.html"),
)

ASSET_PREFIXES: tuple[str, ...] = ("img", "js", "css", "docs")

PAGES_DIR = "pages"
ERROR_PAGE = "error.html"

READ_METHODS: tuple[str, ...] = ("GET", "HEAD")

_FORBIDDEN_SEGMENTS = frozenset({".", ".."})


def normalize_path(path: str) -> tuple[str, ...]:
    """Split a request path into segments, rejecting traversal.

    Duplicate and trailing slashes collapse: ``//img///a.png/`` gives
    ``("img", "a.png")``. The root path gives ``()``.

    Raises:
        HTTPNotFound: a segment is ``.`` or ``..``, or contains a backslash
            or NUL byte.
    """
    segments = tuple(segment for segment in path.split("/") if segment)
    for segment in segments:
        if segment in _FORBIDDEN_SEGMENTS or "\\" in segment or "\x00" in segment:
            raise HTTPNotFound()
    return segments


class RouteMatch(NamedTuple):
    """A matched route plus the path segments it did not consume."""

    route: Route
    remainder: tuple[str, ...] = ()


class Route(ABC):
    """Base class for routes. Routes are immutable once built."""

    __slots__ = ()

    allowed_methods: tuple[str, ...] = READ_METHODS

    @abstractmethod
    def match(self, segments: tuple[str, ...]) -> RouteMatch | None:
        """Return a RouteMatch if this route handles segments, else None."""

    @abstractmethod
    def resolve(self, match: RouteMatch) -> Path:
        """Return the file to serve for a match produced by this route."""


class PageRoute(Route):
    """Exact, case-sensitive route to a single HTML file.

    A missing file here is a packaging defect: ``resolve`` raises
    InternalResourceError (500) rather than a 404.
    """

    __slots__ = ("path", "file", "_segments")

    def __init__(self, path: str, file: str | Path) -> None:
        self.path = path
        self.file = Path(file)
        self._segments = normalize_path(path)

    def match(self, segments: tuple[str, ...]) -> RouteMatch | None:
        if segments == self._segments:
            return RouteMatch(self)
        return None

    def resolve(self, match: RouteMatch) -> Path:
        if not self.file.is_file():
            raise InternalResourceError(self.file)
        return self.file

    def __repr__(self) -> str:
        return f"PageRoute({self.path!r}, {str(self.file)!r})"


class AssetRoute(Route):
    """Prefix route serving files from a directory.

    ``/img/a/b.png`` matches prefix ``img`` with remainder ``("a", "b.png")``
    and resolves to ``<directory>/a/b.png``. The bare prefix (``/img``) does
    not match.
    """

    __slots__ = ("prefix", "directory")

    def __init__(self, prefix: str, directory: str | Path) -> None:
        self.prefix = prefix.strip("/")
        self.directory = Path(directory).resolve()

    def match(self, segments: tuple[str, ...]) -> RouteMatch | None:
        if len(segments) > 1 and segments[0] == self.prefix:
            return RouteMatch(self, segments[1:])
        return None

    def resolve(self, match: RouteMatch) -> Path:
        try:
            file_path = self.directory.joinpath(*match.remainder).resolve()
        except (ValueError, OSError):
            raise HTTPNotFound() from None

        # Symlinks are followed by resolve(); the target must still be inside.
        if not file_path.is_relative_to(self.directory):
            raise HTTPNotFound()
        # is_file() re-raises ENAMETOOLONG and friends before Python 3.13.
        try:
            is_file = file_path.is_file()
        except OSError:
            raise HTTPNotFound() from None
        if not is_file:
            raise HTTPNotFound()
        return file_path

    def __repr__(self) -> str:
        return f"AssetRoute({self.prefix!r}, {str(self.directory)!r})"


class RouteTable:
    """Ordered, fixed list of routes evaluated top to bottom."""

    __slots__ = ("routes",)

    def __init__(self, routes: Iterable[Route]) -> None:
        self.routes: tuple[Route, ...] = tuple(routes)

    def match(self, path: str) -> RouteMatch:
        """Match a request path against the table.

        Raises:
            HTTPNotFound: traversal segment in path, or no route matches.
        """
        segments = normalize_path(path)
        for route in self.routes:
            found = route.match(segments)
            if found is not None:
                return found
        raise HTTPNotFound()

    def __iter__(self):
        return iter(self.routes)

    def __len__(self) -> int:
        return len(self.routes)

    def __repr__(self) -> str:
        return f"RouteTable({list(self.routes)!r})"


def default_routes(site_dir: str | Path) -> RouteTable:
    """Build the site's route table: exact pages first, then asset prefixes."""
    site_dir = Path(site_dir)
    pages_dir = site_dir / PAGES_DIR
    routes: list[Route] = [PageRoute(path, pages_dir / name) for path, name in PAGES]
    routes.extend(AssetRoute(prefix, site_dir / prefix) for prefix in ASSET_PREFIXES)
    return RouteTable(routes)


if __name__ == "__main__":
    for route in default_routes(Path(__file__).parent / "site"):
        print(route)
