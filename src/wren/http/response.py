"""Response values handlers (and the pipeline) return.

``Response`` carries a complete body, ``StreamingResponse`` an iterator
of chunks, and ``Redirect`` only a target URI: the negotiation layer
turns it into a 302 without rendering anything.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator, Mapping
from dataclasses import dataclass, replace
from typing import Self


class _HeaderOps:
    """``with_*`` copy-on-write helpers shared by both response types."""

    __slots__ = ()

    status: int
    headers: tuple[tuple[str, str], ...]

    def with_status(self, status: int) -> Self:
        return replace(self, status=status)  # type: ignore[type-var]

    def with_header(self, name: str, value: str) -> Self:
        """Copy with one more header; existing headers are kept."""
        return replace(self, headers=(*self.headers, (name, value)))  # type: ignore[type-var]

    def with_headers(self, headers: Mapping[str, str]) -> Self:
        return replace(self, headers=(*self.headers, *headers.items()))  # type: ignore[type-var]

    def header(self, name: str) -> str | None:
        """First value of header *name*, compared case-insensitively."""
        wanted = name.lower()
        return next((value for key, value in self.headers if key.lower() == wanted), None)


@dataclass(frozen=True, slots=True)
class Response(_HeaderOps):
    """A complete HTTP response.

    Build one directly or chain copies::

        Response("created", status=201).with_header("X-Thread", name)
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    def with_content_type(self, content_type: str) -> Response:
        return replace(self, content_type=content_type)

    @property
    def body_bytes(self) -> bytes:
        """The body, UTF-8 encoded if it was given as text."""
        return self.body.encode("utf-8") if isinstance(self.body, str) else self.body

    @property
    def text(self) -> str:
        """The body, UTF-8 decoded if it was given as bytes."""
        return self.body.decode("utf-8") if isinstance(self.body, bytes) else self.body


@dataclass(frozen=True, slots=True)
class StreamingResponse(_HeaderOps):
    """A response sent as chunks, sync or async, with chunked encoding."""

    chunks: Iterator[bytes] | AsyncIterator[bytes]
    status: int = 200
    content_type: str = "application/octet-stream"
    headers: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True, slots=True)
class Redirect:
    """Send the client to *url*. Nothing is rendered.

    ::

        return Redirect(f"/threads/{thread_name}")
    """

    url: str
    status: int = 302
    headers: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if not 300 <= self.status <= 399:
            msg = f"Redirect status must be 3xx, got {self.status}"
            raise ValueError(msg)


type AnyResponse = Response | StreamingResponse
