"""Form body parsing.

Only ``application/x-www-form-urlencoded`` is understood; the forum-style
apps this core serves post plain HTML forms.
"""

from urllib.parse import parse_qsl

from wren.errors import BadRequest, UnsupportedMediaType
from wren.http.headers import MultiValues


class FormData(MultiValues):
    """Parsed form fields. ``form["title"]`` returns the first value."""

    __slots__ = ()


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse a URL-encoded request body.

    Raises ``UnsupportedMediaType`` (415) for any other content type and
    ``BadRequest`` (400) when the body is not valid UTF-8.
    """
    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type != "application/x-www-form-urlencoded":
        raise UnsupportedMediaType(media_type or "unknown")
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BadRequest("Form body is not valid UTF-8") from exc
    return FormData(parse_qsl(text, keep_blank_values=True))
