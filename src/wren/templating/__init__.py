"""Templating — kida-backed view rendering with escaping on by default.

Handlers return ``View(name, **model)``; the renderer loads the named
template under ``AppConfig.template_dir`` and renders it. Use ``raw()``
(or the ``raw`` filter) to emit trusted HTML unescaped.
"""

from wren.templating.filters import raw
from wren.templating.renderer import ViewRenderer, create_renderer
from wren.templating.returns import View, ViewResult

__all__ = ["View", "ViewRenderer", "ViewResult", "create_renderer", "raw"]
