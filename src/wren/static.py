"""Static file fallback.

Consulted only when no route matches. Maps the request path onto a
directory, with automatic index-file resolution for directories.
"""

import logging
import mimetypes
from collections.abc import Iterator
from pathlib import Path

from wren.errors import Forbidden, NotFoundError
from wren.http.request import Request
from wren.http.response import AnyResponse, Response, StreamingResponse

logger = logging.getLogger("wren.static")


class StaticFallback:
    """Serve files from *directory* for requests no route claimed.

    Security: resolves symlinks and verifies the final path is within
    the configured directory to prevent path traversal.

    Usage::

        fallback = StaticFallback("./static")
        response = fallback.serve(request)  # raises NotFoundError on a miss
    """

    __slots__ = ("_cache_control", "_chunk_size", "_directory", "_index")

    def __init__(
        self,
        directory: str | Path,
        *,
        index: str = "index.html",
        cache_control: str = "public, max-age=3600",
        chunk_size: int = 64 * 1024,
    ) -> None:
        self._directory = Path(directory).resolve()
        self._index = index
        self._cache_control = cache_control
        self._chunk_size = chunk_size

    @property
    def directory(self) -> Path:
        return self._directory

    def serve(self, request: Request) -> AnyResponse:
        """Serve the file for *request*.

        Raises ``NotFoundError`` when no file exists (or the method is not
        GET/HEAD) and ``Forbidden`` when the path escapes the root.
        """
        if request.method not in ("GET", "HEAD"):
            raise NotFoundError(f"No route matches {request.method} {request.path!r}")

        path = request.path
        relative = path.lstrip("/")
        try:
            file_path = (self._directory / relative).resolve() if relative else self._directory
        except (ValueError, OSError) as exc:
            raise self._miss(path) from exc
        if not file_path.is_relative_to(self._directory):
            logger.warning("rejected path outside static root: %s", path)
            raise Forbidden()

        if file_path.is_dir():
            index_path = file_path / self._index
            if not index_path.is_file():
                raise self._miss(path)
            if relative and not path.endswith("/"):
                return Response(body="", status=301).with_header("Location", path + "/")
            file_path = index_path

        if not file_path.is_file():
            raise self._miss(path)

        return self._serve_file(file_path, head_only=request.method == "HEAD")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _serve_file(self, file_path: Path, *, head_only: bool = False) -> AnyResponse:
        content_type, _ = mimetypes.guess_type(str(file_path))
        if content_type is None:
            content_type = "application/octet-stream"
        if content_type.startswith("text/"):
            content_type = f"{content_type}; charset=utf-8"

        size = file_path.stat().st_size
        if head_only or size <= self._chunk_size:
            body = b"" if head_only else file_path.read_bytes()
            return (
                Response(body=body, content_type=content_type)
                .with_header("Content-Length", str(size))
                .with_header("Cache-Control", self._cache_control)
            )

        return StreamingResponse(
            chunks=self._iter_file(file_path),
            content_type=content_type,
        ).with_header("Cache-Control", self._cache_control)

    def _iter_file(self, file_path: Path) -> Iterator[bytes]:
        with file_path.open("rb") as fh:
            while chunk := fh.read(self._chunk_size):
                yield chunk

    def _miss(self, path: str) -> NotFoundError:
        logger.debug("static miss: %s", path)
        return NotFoundError(f"Nothing at {path!r}")
