"""Wren — a small routing and view-rendering core for server-rendered apps.

Routes map a method and a URI pattern to a handler; handlers return a
redirect or a template + model; views are rendered with kida, HTML-escaped
by default; anything no route claims is looked up in the static root.

Basic usage::

    from wren import App, Redirect, View

    app = App()

    @app.route("/threads/{threadName}")
    def show_thread(threadName: str):
        return View("thread.html", name=threadName)

    @app.route("/threads", methods=["POST"])
    async def create_thread(form):
        return Redirect(f"/threads/{form['name']}")

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BadRequest",
    "ConfigurationError",
    "DuplicateRouteError",
    "HTTPError",
    "HandlerError",
    "MethodNotAllowed",
    "NoRouteMatchError",
    "NotFoundError",
    "Redirect",
    "Request",
    "Response",
    "TemplateNotFoundError",
    "UnsupportedMediaType",
    "View",
    "WrenError",
    "raw",
]


# Public name -> defining module, imported on first attribute access.
_EXPORTS = {
    "App": "wren.app",
    "AppConfig": "wren.config",
    "Request": "wren.http.request",
    "Response": "wren.http.response",
    "Redirect": "wren.http.response",
    "View": "wren.templating",
    "raw": "wren.templating",
    **dict.fromkeys(
        (
            "BadRequest",
            "ConfigurationError",
            "DuplicateRouteError",
            "HTTPError",
            "HandlerError",
            "MethodNotAllowed",
            "NoRouteMatchError",
            "NotFoundError",
            "TemplateNotFoundError",
            "UnsupportedMediaType",
            "WrenError",
        ),
        "wren.errors",
    ),
}


def __getattr__(name: str) -> object:
    """Resolve the public API lazily so ``import wren`` stays cheap."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    from importlib import import_module

    return getattr(import_module(module_name), name)
