"""The request object handlers receive.

Metadata is a frozen dataclass built from the ASGI scope. The body is
owned by a small reader that pulls ``http.request`` messages once, so
copies of a request (one per route match) share a single read.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import parse_qsl

from wren._internal.asgi import Receive, Scope
from wren.errors import PayloadTooLarge
from wren.http.forms import FormData, parse_form_data
from wren.http.headers import Headers, QueryParams


class BodyReader:
    """Reads an ASGI request body at most once and remembers it.

    *limit* caps the number of bytes accepted; going over raises
    ``PayloadTooLarge`` (413), whether the client announced the size in
    ``Content-Length`` or streamed it.
    """

    __slots__ = ("_consumed", "_data", "_form", "_limit", "_receive")

    def __init__(self, receive: Receive, *, limit: int | None = None) -> None:
        self._receive = receive
        self._limit = limit
        self._data: bytes | None = None
        self._form: FormData | None = None
        self._consumed = False

    async def chunks(self) -> AsyncIterator[bytes]:
        """Yield body chunks straight from the server. Single use."""
        if self._consumed:
            msg = "The request body has already been read"
            raise RuntimeError(msg)
        self._consumed = True
        more_body = True
        while more_body:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                return
            if chunk := message.get("body", b""):
                yield chunk
            more_body = message.get("more_body", False)

    async def read(self, declared_length: int | None = None) -> bytes:
        if self._data is not None:
            return self._data
        if self._limit is not None and (declared_length or 0) > self._limit:
            raise PayloadTooLarge(self._limit)

        buffer = bytearray()
        async for chunk in self.chunks():
            buffer += chunk
            if self._limit is not None and len(buffer) > self._limit:
                raise PayloadTooLarge(self._limit)
        self._data = bytes(buffer)
        return self._data

    async def form(self, content_type: str, declared_length: int | None = None) -> FormData:
        if self._form is None:
            self._form = parse_form_data(await self.read(declared_length), content_type)
        return self._form


@dataclass(frozen=True, slots=True)
class Request:
    """A frozen view of one HTTP request.

    ``path_params`` is empty until a route matches; the handler pipeline
    then hands out a copy carrying the binding. Body access is async::

        data = await request.body()
        form = await request.form()
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    http_version: str = "1.1"
    client: tuple[str, int] | None = None
    path_params: dict[str, str] = field(default_factory=dict)
    _body: BodyReader | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive, *, max_body: int | None = None) -> Request:
        """Build a request from an ASGI ``http`` scope."""
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers.from_raw(scope.get("headers", ())),
            query=QueryParams(
                parse_qsl(scope.get("query_string", b"").decode("latin-1"), keep_blank_values=True)
            ),
            http_version=scope.get("http_version", "1.1"),
            client=(client[0], client[1]) if client else None,
            _body=BodyReader(receive, limit=max_body),
        )

    def with_path_params(self, path_params: dict[str, str]) -> Request:
        """Copy of this request bound to a route match."""
        return replace(self, path_params=path_params)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """``Content-Length`` as an int; None when absent or malformed."""
        value = self.headers.get("content-length")
        if value is None or not value.isdigit():
            return None
        return int(value)

    def _reader(self) -> BodyReader:
        if self._body is None:
            msg = "This request was built without a body"
            raise RuntimeError(msg)
        return self._body

    async def body(self) -> bytes:
        """The complete body. Raises ``PayloadTooLarge`` over the limit."""
        return await self._reader().read(self.content_length)

    def stream(self) -> AsyncIterator[bytes]:
        """Body chunks as they arrive, for handlers that do not buffer."""
        return self._reader().chunks()

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        return json.loads(await self.body())

    async def form(self) -> FormData:
        """The URL-encoded form body, parsed once."""
        content_type = self.content_type or "application/x-www-form-urlencoded"
        return await self._reader().form(content_type, self.content_length)
