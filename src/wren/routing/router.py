"""Route table with ordered, first-registered-wins matching.

Routes are registered during setup and the table is frozen when the app
freezes. Candidates are bucketed by segment count so a lookup only scans
patterns of the right length, in registration order.
"""

import logging
from collections.abc import Callable
from typing import Any

from wren.errors import (
    ConfigurationError,
    DuplicateRouteError,
    MethodNotAllowed,
    NoRouteMatchError,
)
from wren.routing.route import PathSegment, Route, RouteMatch

logger = logging.getLogger("wren.routing")

SUPPORTED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})


def split_path(path: str) -> list[str]:
    """Split a URI path into ``/``-delimited segments.

    Leading and trailing slashes are ignored, so ``"/"`` has no segments
    and ``"/threads/"`` equals ``"/threads"``.  Inner empty segments
    (``"/a//b"``) are kept so they never match.
    """
    stripped = path.strip("/")
    if not stripped:
        return []
    return stripped.split("/")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route pattern string into segments.

    Examples::

        "/threads"               -> [PathSegment("threads")]
        "/threads/{threadName}"  -> [PathSegment("threads"),
                                     PathSegment("{threadName}", is_param=True, ...)]
    """
    segments: list[PathSegment] = []
    seen: set[str] = set()
    for part in split_path(path):
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Route {path!r} uses <param> syntax. "
                f"Path variables are written as {{param}}, e.g. /threads/{{name}}."
            )
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            name = part[1:-1]
            if not name.isidentifier():
                msg = f"Route {path!r} has an invalid path variable {part!r}."
                raise ConfigurationError(msg)
            if name in seen:
                msg = f"Route {path!r} binds {name!r} more than once."
                raise ConfigurationError(msg)
            seen.add(name)
            segments.append(PathSegment(value=part, is_param=True, param_name=name))
        elif "{" in part or "}" in part:
            msg = f"Route {path!r} has a malformed segment {part!r}."
            raise ConfigurationError(msg)
        else:
            segments.append(PathSegment(value=part))
    return segments


class Router:
    """Ordered route table.

    Usage::

        router = Router()
        router.register("GET", "/threads", list_threads)
        router.register("GET", "/threads/{threadName}", show_thread)
        router.compile()
        match = router.match("GET", "/threads/general")
        match.path_params  # {"threadName": "general"}

    When several patterns could match the same URI, the one registered
    first wins.
    """

    __slots__ = ("_by_length", "_compiled", "_keys", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._by_length: dict[int, list[Route]] = {}
        self._keys: set[tuple[str, tuple[str | None, ...]]] = set()
        self._compiled = False

    def register(
        self,
        method: str,
        pattern: str,
        handler: Callable[..., Any],
        *,
        name: str | None = None,
    ) -> Route:
        """Build a route from *pattern* and add it to the table."""
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            msg = (
                f"Unsupported method {method!r} for route {pattern!r}. "
                f"Use one of: {', '.join(sorted(SUPPORTED_METHODS))}."
            )
            raise ConfigurationError(msg)
        route = Route(
            method=method,
            pattern=pattern,
            segments=tuple(parse_path(pattern)),
            handler=handler,
            name=name,
        )
        self.add(route)
        return route

    def add(self, route: Route) -> None:
        """Add a prepared route. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        if route.key in self._keys:
            raise DuplicateRouteError(route.method, route.pattern)

        self._keys.add(route.key)
        self._routes.append(route)
        self._by_length.setdefault(len(route.segments), []).append(route)
        logger.debug("registered %s %s -> %s", route.method, route.pattern, _handler_name(route))

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order."""
        return list(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def compile(self) -> None:
        """Freeze the table. No more routes can be added."""
        self._compiled = True

    def lookup(self, method: str, path: str) -> RouteMatch | None:
        """Return the first registered route matching *method* and *path*."""
        method = method.upper()
        parts = split_path(path)
        for route in self._by_length.get(len(parts), ()):
            if route.method != method:
                continue
            params = _bind(route.segments, parts)
            if params is not None:
                return RouteMatch(route=route, path_params=params)
        return None

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request against the table.

        Returns a ``RouteMatch`` on success.
        Raises ``NoRouteMatchError`` if no pattern matches the path.
        Raises ``MethodNotAllowed`` if patterns match, but only for
        other methods.
        """
        found = self.lookup(method, path)
        if found is not None:
            return found

        parts = split_path(path)
        allowed = frozenset(
            route.method
            for route in self._by_length.get(len(parts), ())
            if _bind(route.segments, parts) is not None
        )
        if allowed:
            raise MethodNotAllowed(allowed)
        raise NoRouteMatchError(f"No route matches {method.upper()} {path!r}")


def _bind(segments: tuple[PathSegment, ...], parts: list[str]) -> dict[str, str] | None:
    """Match equal-length *segments* against *parts*, returning the binding."""
    params: dict[str, str] = {}
    for seg, part in zip(segments, parts, strict=True):
        if not seg.matches(part):
            return None
        if seg.is_param:
            params[seg.param_name or ""] = part
    return params


def _handler_name(route: Route) -> str:
    return getattr(route.handler, "__qualname__", repr(route.handler))
