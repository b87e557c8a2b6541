"""The ``wren`` command.

::

    wren routes forum:app            # print the route table
    wren run forum:app --port 3000   # serve with pounce

Subcommand modules are imported only when chosen, so ``wren routes``
works without the optional server dependency.
"""

import argparse


def _routes(args: argparse.Namespace) -> None:
    from wren.cli._routes import run_routes

    run_routes(args)


def _run(args: argparse.Namespace) -> None:
    from wren.cli._run import run_server

    run_server(args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wren",
        description="Routing and view rendering for server-rendered apps.",
    )
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    routes = commands.add_parser("routes", help="print the route table in match order")
    routes.add_argument("app", help="module:attr or path/to/app.py:attr")
    routes.set_defaults(func=_routes)

    run = commands.add_parser("run", help="serve the app")
    run.add_argument("app", help="module:attr or path/to/app.py:attr")
    run.add_argument("--host", help="bind address (default: AppConfig.host)")
    run.add_argument("--port", type=int, help="bind port (default: AppConfig.port)")
    run.add_argument("--log-level", help="wren log level (default: AppConfig.log_level)")
    run.set_defaults(func=_run)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``wren`` console script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        raise SystemExit(0)
    args.func(args)
