"""Built-in template filters and the explicit unescaped-output helper.

Autoescaping is always on. The only ways to emit a value unescaped are
the ``raw`` filter inside a template and ``raw()`` on the Python side;
both are named so that unescaped output is visible at the call site.
"""

from typing import Any

from kida.template import Markup


def raw(value: Any) -> Markup:
    """Mark *value* as trusted HTML so it is rendered without escaping.

    Usage in a handler::

        return View("post.html", body=raw(sanitized_html))

    Usage in a template::

        {{ post.body | raw }}
    """
    if isinstance(value, Markup):
        return value
    return Markup("" if value is None else str(value))


def pluralize(count: int, singular: str = "", plural: str = "s") -> str:
    """Return *singular* when ``count == 1``, else *plural*.

    Usage::

        {{ n }} post{{ n | pluralize }}
    """
    return singular if count == 1 else plural


BUILTIN_FILTERS: dict[str, Any] = {
    "pluralize": pluralize,
    "raw": raw,
}
