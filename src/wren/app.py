"""The wren App: one route table, one view renderer, one static root.

An App is configured at import time (routes, error pages, template
filters, lifecycle hooks) and compiled into an immutable runtime on the
first ASGI call. After that, every setup method raises ``RuntimeError``.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.config import AppConfig
from wren.routing.route import Route
from wren.routing.router import Router
from wren.server.errors import ErrorHandlers
from wren.server.handler import handle_request
from wren.static import StaticFallback
from wren.templating.renderer import ViewRenderer, create_renderer

type Handler = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class _Runtime:
    """Everything a request needs, published in one assignment."""

    router: Router
    renderer: ViewRenderer
    static: StaticFallback | None
    error_handlers: ErrorHandlers


class App:
    """A wren application.

    Routes are added with ``register()`` or the ``route()`` decorator.
    Registering the same method and pattern twice raises
    ``DuplicateRouteError`` on the spot, not at the first request.

    Thread safety:
        Setup is expected to happen on one thread. Compilation takes a
        lock and re-checks, so concurrent first requests build the
        runtime exactly once; requests only ever read it.
    """

    __slots__ = (
        "_error_handlers",
        "_filters",
        "_freeze_lock",
        "_globals",
        "_router",
        "_runtime",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router = Router()
        self._error_handlers: ErrorHandlers = {}
        self._filters: dict[str, Callable[..., Any]] = {}
        self._globals: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._freeze_lock = threading.Lock()
        self._runtime: _Runtime | None = None

    # -- Routes --

    def register(
        self,
        method: str,
        pattern: str,
        handler: Handler,
        *,
        name: str | None = None,
    ) -> Route:
        """Map *method* requests for *pattern* to *handler*.

        ``{name}`` segments are path variables, passed to the handler as
        keyword arguments of the same name::

            app.register("GET", "/threads/{threadName}", show_thread)
        """
        self._check_not_frozen()
        return self._router.register(method, pattern, handler, name=name)

    def route(
        self,
        pattern: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of ``register()``, once per method (default GET)."""

        def decorator(func: Handler) -> Handler:
            for method in methods or ["GET"]:
                self.register(method, pattern, func, name=name)
            return func

        return decorator

    @property
    def routes(self) -> list[Route]:
        """Registered routes, in the order they are tried."""
        return self._router.routes

    @property
    def renderer(self) -> ViewRenderer:
        """The shared view renderer. Accessing it compiles the app."""
        return self._ensure_frozen().renderer

    # -- Error pages --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[Handler], Handler]:
        """Register the handler for a status code or exception type.

        The handler may take ``()``, ``(request)`` or ``(request, exc)``
        and return anything a route handler may return::

            @app.error(404)
            def not_found(request):
                return View("404.html", path=request.path)
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Template environment --

    def template_filter(self, name: str | None = None) -> Callable[[Handler], Handler]:
        """Expose a function to templates as ``{{ value | name }}``."""
        return self._template_registrar(self._filters, name)

    def template_global(self, name: str | None = None) -> Callable[[Handler], Handler]:
        """Expose a function or value to every template as ``name``."""
        return self._template_registrar(self._globals, name)

    def _template_registrar(
        self, target: dict[str, Any], name: str | None
    ) -> Callable[[Handler], Handler]:
        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            target[name or func.__name__] = func
            return func

        return decorator

    # -- Lifecycle --

    def on_startup(self, func: Handler) -> Handler:
        """Run *func* (sync or async) before the first request is served."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Handler) -> Handler:
        """Run *func* (sync or async) when the server stops."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    async def startup(self) -> None:
        """Run startup hooks in registration order."""
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        """Run shutdown hooks in registration order."""
        for hook in self._shutdown_hooks:
            await invoke(hook)

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Compile the app and serve it with pounce until interrupted."""
        self._ensure_frozen()

        from wren.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            reload_include=self.config.reload_include,
            reload_dirs=self.config.reload_dirs,
        )

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return

        runtime = self._ensure_frozen()
        await handle_request(
            scope,
            receive,
            send,
            router=runtime.router,
            renderer=runtime.renderer,
            static=runtime.static,
            error_handlers=runtime.error_handlers,
            debug=self.config.debug,
            max_body=self.config.max_content_length,
        )

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        """Answer ``lifespan`` messages until shutdown.

        The app is compiled during startup so a bad template directory
        or route table fails the server start rather than a request.
        """
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    await self.startup()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Compilation --

    def _ensure_frozen(self) -> _Runtime:
        runtime = self._runtime
        if runtime is not None:
            return runtime
        with self._freeze_lock:
            if self._runtime is None:
                self._runtime = self._compile()
            return self._runtime

    def _compile(self) -> _Runtime:
        """Build the runtime. Called once, under ``_freeze_lock``."""
        self._router.compile()
        renderer = create_renderer(self.config, self._filters, self._globals)

        static = None
        static_dir = self.config.static_dir
        if static_dir is not None and Path(static_dir).is_dir():
            static = StaticFallback(
                static_dir,
                index=self.config.static_index,
                cache_control=self.config.static_cache_control,
            )

        return _Runtime(
            router=self._router,
            renderer=renderer,
            static=static,
            error_handlers=dict(self._error_handlers),
        )

    def _check_not_frozen(self) -> None:
        if self._runtime is not None:
            msg = (
                "Cannot modify the app after it has started serving requests; "
                "register routes, error handlers and template helpers first."
            )
            raise RuntimeError(msg)
