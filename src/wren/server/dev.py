"""Serve a wren App with the pounce ASGI server.

pounce is an optional dependency (``pip install wren[server]``), so it is
imported only when a server is actually started.
"""

import logging

logger = logging.getLogger("wren.server")

# Template and asset edits should restart a reloading server too.
DEFAULT_RELOAD_INCLUDE = (".html", ".css", ".js")


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    reload_include: tuple[str, ...] = (),
    reload_dirs: tuple[str, ...] = (),
    app_path: str | None = None,
) -> None:
    """Run *app* on *host*:*port* until interrupted.

    With *reload*, pounce watches the working directory plus
    *reload_dirs*. *app_path* lets it re-import the app after a change;
    file-path targets (``app.py:app``) cannot be re-imported by name and
    are served as the live object instead.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    if app_path is not None and app_path.partition(":")[0].endswith(".py"):
        app_path = None

    include = tuple(dict.fromkeys((*DEFAULT_RELOAD_INCLUDE, *reload_include))) if reload else ()
    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        reload_include=include,
        reload_dirs=reload_dirs if reload else (),
    )
    logger.info("serving on http://%s:%d%s", host, port, " (reload)" if reload else "")
    Server(config, app, app_path=app_path).run()
