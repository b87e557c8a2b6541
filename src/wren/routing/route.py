"""Route, PathSegment and RouteMatch frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Literal:   ``/threads``       (is_param=False)
    Variable:  ``/{threadName}``  (is_param=True, param_name="threadName")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None

    def matches(self, part: str) -> bool:
        """Whether a single request path segment satisfies this segment."""
        if self.is_param:
            return part != ""
        return part == self.value


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    Pattern segments are fixed at registration; the router never
    re-parses ``pattern``.
    """

    method: str
    pattern: str
    segments: tuple[PathSegment, ...]
    handler: Callable[..., Any]
    name: str | None = None

    @property
    def key(self) -> tuple[str, tuple[str | None, ...]]:
        """Identity used for duplicate detection.

        Variable names are left out: ``/t/{a}`` and ``/t/{b}`` match the
        same paths, so the second could never be reached.
        """
        return (self.method, tuple(None if s.is_param else s.value for s in self.segments))


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match.

    ``path_params`` is the per-request binding of variable names to the
    matched segment strings.
    """

    route: Route
    path_params: dict[str, str]
