"""Request pipeline: ASGI scope in, ASGI messages out.

Builds a ``Request``, finds the route (or falls back to static files),
calls the handler with arguments taken from its signature, negotiates
the result, and sends it. Every failure becomes an error response
before anything is written, so a client never sees half a page.
"""

import functools
import inspect
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.errors import HandlerError, HTTPError, NoRouteMatchError
from wren.http.forms import FormData
from wren.http.request import Request
from wren.http.response import AnyResponse, StreamingResponse
from wren.routing.route import RouteMatch
from wren.routing.router import Router
from wren.server.errors import ErrorHandlers, handle_http_error, handle_internal_error
from wren.server.negotiation import negotiate
from wren.server.sender import send_response, send_streaming_response
from wren.static import StaticFallback
from wren.templating.renderer import ViewRenderer


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    renderer: ViewRenderer | None,
    static: StaticFallback | None,
    error_handlers: ErrorHandlers,
    debug: bool,
    max_body: int | None = None,
) -> None:
    """Serve one ``http`` scope. Other scope types are ignored."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive, max_body=max_body)
    try:
        response = await dispatch(request, router=router, renderer=renderer, static=static)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, renderer, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, renderer, debug)

    if isinstance(response, StreamingResponse):
        await send_streaming_response(response, send)
        return

    if request.method == "HEAD" and response.body:
        length = len(response.body_bytes)
        response = replace(response, body=b"").with_header("Content-Length", str(length))
    await send_response(response, send)


async def dispatch(
    request: Request,
    *,
    router: Router,
    renderer: ViewRenderer | None,
    static: StaticFallback | None,
) -> AnyResponse:
    """Run the route for *request*, or the static fallback if none matches.

    HEAD is served by the GET route of the same path. A path that only
    matches under other methods is a 405 and never reaches static files.
    """
    method = "GET" if request.method == "HEAD" else request.method
    try:
        match = router.match(method, request.path)
    except NoRouteMatchError:
        if static is None:
            raise
        return static.serve(request)
    return await invoke_handler(match, request, renderer=renderer)


async def invoke_handler(
    match: RouteMatch,
    request: Request,
    *,
    renderer: ViewRenderer | None,
) -> AnyResponse:
    """Call the matched handler and turn its result into a response.

    An ``HTTPError`` the handler raises on purpose keeps its status; any
    other exception becomes ``HandlerError`` (500) with the original as
    ``__cause__``. A ``Redirect`` result never reaches the renderer.
    """
    handler = match.route.handler
    request = request.with_path_params(match.path_params)
    kwargs = await build_handler_kwargs(handler, request, match.path_params)

    try:
        result = await invoke(handler, **kwargs)
    except HTTPError:
        raise
    except Exception as exc:
        name = getattr(handler, "__qualname__", repr(handler))
        raise HandlerError(name, detail=f"{name} raised {type(exc).__name__}: {exc}") from exc

    return negotiate(result, renderer=renderer)


@dataclass(frozen=True, slots=True)
class _Param:
    """How to fill one handler parameter."""

    name: str
    source: str  # "request", "path", "body" or "form"
    convert: Callable[[str], Any] | None = None


@functools.cache
def _signature_plan(handler: Callable[..., Any]) -> tuple[_Param, ...]:
    """Inspect *handler* once; later requests reuse the plan."""
    plan: list[_Param] = []
    for name, param in inspect.signature(handler, eval_str=True).parameters.items():
        annotation = param.annotation
        typed = annotation not in (inspect.Parameter.empty, str) and callable(annotation)
        convert = annotation if typed else None
        if name == "request" or annotation is Request:
            plan.append(_Param(name, "request"))
        elif name == "body":
            plan.append(_Param(name, "body", convert))
        elif name == "form" or annotation is FormData:
            plan.append(_Param(name, "form", convert))
        else:
            plan.append(_Param(name, "path", convert))
    return tuple(plan)


async def build_handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    path_params: dict[str, str],
) -> dict[str, Any]:
    """Keyword arguments for *handler*, resolved by parameter name.

    - ``request`` (or a ``Request`` annotation): the request
    - a path variable's name: its bound segment, converted with the
      annotation when there is one (``int``); left as text if that fails
    - ``body``: the raw body bytes
    - ``form`` (or a ``FormData`` annotation): the parsed form
    """
    kwargs: dict[str, Any] = {}
    for param in _signature_plan(handler):
        if param.source == "request":
            kwargs[param.name] = request
        elif param.name in path_params:
            kwargs[param.name] = _convert(path_params[param.name], param.convert)
        elif param.source == "body":
            kwargs[param.name] = await request.body()
        elif param.source == "form":
            kwargs[param.name] = await request.form()
    return kwargs


def _convert(value: str, convert: Callable[[str], Any] | None) -> Any:
    if convert is None:
        return value
    try:
        return convert(value)
    except (ValueError, TypeError):
        return value
