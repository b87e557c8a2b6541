"""Error handling pipeline for wren requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers or plain-text defaults.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from wren._internal.invoke import invoke
from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import AnyResponse, Response
from wren.server.negotiation import negotiate
from wren.templating.renderer import ViewRenderer

logger = logging.getLogger("wren.server")

type ErrorHandlers = dict[int | type, Callable[..., Any]]


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    renderer: ViewRenderer | None,
) -> AnyResponse:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    arity = len(inspect.signature(handler).parameters)
    args = (request, exc)[: min(arity, 2)]
    return negotiate(await invoke(handler, *args), renderer=renderer)


def _find_handler(
    error_handlers: ErrorHandlers, exc: Exception, status: int
) -> Callable[..., Any] | None:
    """Exact exception type, then status code, then base classes."""
    handler = error_handlers.get(type(exc)) or error_handlers.get(status)
    if handler is not None:
        return handler
    for cls in type(exc).__mro__[1:]:
        handler = error_handlers.get(cls)
        if handler is not None:
            return handler
    return None


async def _custom_response(
    exc: Exception,
    status: int,
    request: Request,
    error_handlers: ErrorHandlers,
    renderer: ViewRenderer | None,
) -> AnyResponse | None:
    """The registered handler's response, or None to use the default.

    A handler that returns a plain 200 gets the error's status. Headers the
    error carries (such as ``Allow`` on a 405) are added unless the handler
    set them. A handler that fails itself is logged and the default page is
    used instead.
    """
    handler = _find_handler(error_handlers, exc, status)
    if handler is None:
        return None
    try:
        response = await call_error_handler(handler, request, exc, renderer)
    except Exception:
        logger.exception("error handler %r failed for %d", handler, status)
        return None
    for name, value in getattr(exc, "headers", ()):
        if response.header(name) is None:
            response = response.with_header(name, value)
    return response.with_status(status) if response.status == 200 else response


def _plain(body: str, status: int, headers: tuple[tuple[str, str], ...] = ()) -> Response:
    return Response(
        body=body, status=status, content_type="text/plain; charset=utf-8", headers=headers
    )


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    renderer: ViewRenderer | None,
    debug: bool,
) -> AnyResponse:
    """Response for an ``HTTPError`` raised anywhere in the pipeline.

    5xx errors are logged with their traceback; the rest at DEBUG.
    """
    if exc.status >= 500:
        logger.error(
            "%d %s %s: %s", exc.status, request.method, request.path, exc.detail, exc_info=exc
        )
    else:
        logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    custom = await _custom_response(exc, exc.status, request, error_handlers, renderer)
    if custom is not None:
        return custom

    if exc.status >= 500 and not debug:
        return _plain("Internal Server Error", exc.status, exc.headers)
    return _plain(exc.detail or f"Error {exc.status}", exc.status, exc.headers)


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    renderer: ViewRenderer | None,
    debug: bool,
) -> AnyResponse:
    """Response for an exception that is not an ``HTTPError``: always 500."""
    logger.exception("500 %s %s", request.method, request.path)

    custom = await _custom_response(exc, 500, request, error_handlers, renderer)
    if custom is not None:
        return custom

    if debug:
        return _plain(f"Internal Server Error\n\n{type(exc).__name__}: {exc}", 500)
    return _plain("Internal Server Error", 500)
