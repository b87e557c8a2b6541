"""View — the template + model result type handlers return.

Together with ``Redirect`` it forms ``ViewResult``, a handler's declared
outcome. The negotiation layer inspects these to pick the renderer or the
redirect path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from wren.http.response import Redirect


@dataclass(frozen=True, slots=True)
class View:
    """Render a named template against a model.

    Usage::

        return View("thread.html", thread=thread, posts=posts)

    The model is stored read-only so the result cannot change after the
    handler returns it.
    """

    name: str
    model: MappingProxyType[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __init__(self, name: str, /, **model: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "model", MappingProxyType(dict(model)))

    @classmethod
    def of(cls, name: str, model: dict[str, Any]) -> View:
        """Build a View from an existing mapping (keys need not be identifiers)."""
        view = cls(name)
        object.__setattr__(view, "model", MappingProxyType(dict(model)))
        return view


type ViewResult = View | Redirect
