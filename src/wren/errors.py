"""Wren exception hierarchy.

Shared across Router, App, handler invocation, rendering and the static
fallback so every module raises and catches the same types.
"""

from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when app configuration or route registration is invalid.

    Surfaces at startup, before the first request is served.
    """


class DuplicateRouteError(ConfigurationError):
    """A route with the same method and pattern is already registered."""

    def __init__(self, method: str, pattern: str) -> None:
        self.method = method
        self.pattern = pattern
        super().__init__(f"Route {method} {pattern!r} is already registered.")


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, the static fallback, the renderer, or handlers.
    The ASGI handler catches these and dispatches to the matching
    ``@app.error()`` handler, or renders a plain-text default.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFoundError(HTTPError):
    """404 — nothing at the requested path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class NoRouteMatchError(NotFoundError):
    """No registered route matches the request.

    Recovered inside the request pipeline by trying the static fallback.
    """


class Forbidden(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """403 — the request resolved outside an allowed root."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status=403, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — a route exists for the path but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class PayloadTooLarge(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """413 — request body exceeds ``AppConfig.max_content_length``."""

    def __init__(self, limit: int) -> None:
        super().__init__(status=413, detail=f"Request body exceeds {limit} bytes")


class BadRequest(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """400 — the client sent a request the server cannot interpret."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class UnsupportedMediaType(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """415 — the request body is in a format the handler cannot read."""

    def __init__(self, media_type: str) -> None:
        super().__init__(status=415, detail=f"Unsupported media type {media_type!r}")


class TemplateNotFoundError(HTTPError):
    """500 — a handler asked for a template that does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__(status=500, detail=f"Template {name!r} not found")


class HandlerError(HTTPError):
    """500 — a route handler raised an unexpected exception.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, handler_name: str, detail: str = "") -> None:
        super().__init__(
            status=500,
            detail=detail or f"Handler {handler_name!r} failed",
        )
