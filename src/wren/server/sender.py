"""ASGI response sending — translates wren responses to ASGI messages.

Handles both single-body responses and chunked streaming responses.
"""

import logging
from collections.abc import AsyncIterator

from wren._internal.asgi import Send
from wren.http.response import Response, StreamingResponse

logger = logging.getLogger("wren.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _encode_headers(
    content_type: str, headers: tuple[tuple[str, str], ...]
) -> list[tuple[bytes, bytes]]:
    raw: list[tuple[bytes, bytes]] = [(b"content-type", content_type.encode("latin-1"))]
    raw.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers
    )
    return raw


async def send_response(response: Response, send: Send) -> None:
    """Translate a Response into ASGI send() calls.

    An explicit ``Content-Length`` header (HEAD responses for static
    files) is kept; otherwise it is computed from the body.
    """
    raw_headers = _encode_headers(response.content_type, response.headers)
    body = response.body_bytes if _body_allowed(response.status) else b""

    if response.header("content-length") is None:
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send({"type": "http.response.start", "status": response.status, "headers": raw_headers})
    await send({"type": "http.response.body", "body": body})


async def send_streaming_response(response: StreamingResponse, send: Send) -> None:
    """Send a streaming response via chunked transfer encoding.

    Sends headers immediately, then each chunk as an ASGI body message
    with ``more_body=True``, and closes with an empty body. A failure
    mid-stream is logged and the stream is closed early; the status line
    has already gone out, so no error page can follow.
    """
    raw_headers = _encode_headers(response.content_type, response.headers)
    raw_headers.append((b"transfer-encoding", b"chunked"))
    await send({"type": "http.response.start", "status": response.status, "headers": raw_headers})

    try:
        if isinstance(response.chunks, AsyncIterator):
            async for chunk in response.chunks:
                if chunk:
                    await send({"type": "http.response.body", "body": chunk, "more_body": True})
        else:
            for chunk in response.chunks:
                if chunk:
                    await send({"type": "http.response.body", "body": chunk, "more_body": True})
    except Exception:
        logger.exception("stream aborted after headers were sent")

    await send({"type": "http.response.body", "body": b"", "more_body": False})
