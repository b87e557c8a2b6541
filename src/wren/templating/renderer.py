"""View rendering on top of a kida Environment.

The renderer owns one kida environment for the lifetime of the app and
memoizes compiled templates, so a template file is read and compiled on
first use and reused by later requests.
"""

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from kida import Environment, FileSystemLoader
from kida.environment.exceptions import TemplateNotFoundError as KidaTemplateNotFoundError

from wren.config import AppConfig
from wren.errors import TemplateNotFoundError
from wren.templating.filters import BUILTIN_FILTERS
from wren.templating.returns import View

logger = logging.getLogger("wren.templating")


class ViewRenderer:
    """Render ``View`` results to HTML strings.

    Thread safety:
        Template loads are serialized under a lock with a double check,
        so concurrent first requests compile each template once.
        Rendering itself touches no shared state.
    """

    __slots__ = ("_cache", "_cache_enabled", "_env", "_lock")

    def __init__(self, env: Environment, *, cache: bool = True) -> None:
        self._env = env
        self._cache_enabled = cache
        self._cache: dict[str, Any] = {}
        self._lock = threading.Lock()

    @property
    def env(self) -> Environment:
        """The underlying kida environment."""
        return self._env

    @property
    def cached_templates(self) -> frozenset[str]:
        """Names of templates currently held in the memo."""
        return frozenset(self._cache)

    def get_template(self, name: str) -> Any:
        """Return the compiled template *name*.

        Raises ``TemplateNotFoundError`` if the loader cannot find it.
        """
        if not self._cache_enabled:
            return self._load(name)

        template = self._cache.get(name)
        if template is not None:
            return template
        with self._lock:
            template = self._cache.get(name)
            if template is None:
                template = self._load(name)
                self._cache[name] = template
        return template

    def clear_cache(self) -> None:
        """Drop every memoized template."""
        with self._lock:
            self._cache.clear()

    def render(self, view: View) -> str:
        """Render *view*'s template with its model. Values are escaped."""
        template = self.get_template(view.name)
        return template.render(dict(view.model))

    def render_string(self, source: str, model: Mapping[str, Any] | None = None) -> str:
        """Render an inline template source. Values are escaped."""
        template = self._env.from_string(source)
        return template.render(dict(model or {}))

    def _load(self, name: str) -> Any:
        try:
            template = self._env.get_template(name)
        except (KidaTemplateNotFoundError, FileNotFoundError) as exc:
            raise TemplateNotFoundError(name) from exc
        logger.debug("loaded template %s", name)
        return template


def create_environment(
    config: AppConfig,
    filters: dict[str, Callable[..., Any]] | None = None,
    globals_: dict[str, Any] | None = None,
) -> Environment:
    """Create a kida Environment from app configuration.

    Built-in filters are registered first so user filters may override
    ``pluralize``; the ``raw`` filter is re-applied last and cannot be
    replaced, since it is the one named escape hatch.
    """
    env = Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=True,
        auto_reload=config.debug or not config.cache_templates,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )
    env.update_filters(BUILTIN_FILTERS)
    if filters:
        env.update_filters(filters)
    env.update_filters({"raw": BUILTIN_FILTERS["raw"]})

    for name, value in (globals_ or {}).items():
        env.add_global(name, value)
    return env


def create_renderer(
    config: AppConfig,
    filters: dict[str, Callable[..., Any]] | None = None,
    globals_: dict[str, Any] | None = None,
) -> ViewRenderer:
    """Build the app's renderer. Called once when the app freezes."""
    env = create_environment(config, filters, globals_)
    return ViewRenderer(env, cache=config.cache_templates)
