"""Content negotiation — maps handler return values to responses.

isinstance-based dispatch, no magic, fully predictable. A ``Redirect``
short-circuits before the renderer is ever consulted.
"""

import json as json_module
from typing import Any

from wren.errors import ConfigurationError
from wren.http.response import AnyResponse, Redirect, Response, StreamingResponse
from wren.templating.renderer import ViewRenderer
from wren.templating.returns import View


def negotiate(value: Any, *, renderer: ViewRenderer | None = None) -> AnyResponse:
    """Convert a route handler's return value to a response.

    Dispatch order:

    1. ``Response`` / ``StreamingResponse`` -> pass through
    2. ``Redirect``         -> 302-class, Location header, empty body
    3. ``View``             -> render via the ViewRenderer -> text/html
    4. ``str``              -> 200, text/html
    5. ``bytes``            -> 200, application/octet-stream
    6. ``dict`` / ``list``  -> 200, application/json
    7. ``(value, int)``     -> negotiate value, override status
    8. ``(value, int, dict)`` -> negotiate value, override status + headers
    """
    match value:
        case Response() | StreamingResponse():
            return value
        case Redirect():
            return (
                Response(body="")
                .with_status(value.status)
                .with_header("Location", value.url)
                .with_headers(dict(value.headers))
            )
        case View():
            if renderer is None:
                msg = (
                    "View results require a template renderer. "
                    "Ensure a template_dir is configured in AppConfig."
                )
                raise ConfigurationError(msg)
            return Response(body=renderer.render(value), content_type="text/html; charset=utf-8")
        case str():
            return Response(body=value, content_type="text/html; charset=utf-8")
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json; charset=utf-8",
            )
        case (inner, int() as status):
            return negotiate(inner, renderer=renderer).with_status(status)
        case (inner, int() as status, dict() as headers):
            return negotiate(inner, renderer=renderer).with_status(status).with_headers(headers)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                f"Return View, Redirect, Response, str, bytes, dict or list."
            )
            raise TypeError(msg)
