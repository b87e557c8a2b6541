"""``wren routes``: print the route table."""

import argparse
import sys

from wren.cli._resolve import resolve_app
from wren.routing.route import Route

HEADER = ("METHOD", "PATTERN", "HANDLER")


def _row(route: Route) -> tuple[str, str, str]:
    handler = getattr(route.handler, "__name__", repr(route.handler))
    if route.name:
        handler = f"{handler} ({route.name})"
    return (route.method, route.pattern, handler)


def run_routes(args: argparse.Namespace) -> None:
    """Print one line per route of ``args.app``, in registration order.

    Registration order is match order: when two patterns overlap, the
    upper row wins.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    rows = [_row(route) for route in app.routes]
    if not rows:
        print("No routes registered.")
        return

    method_width = max(len(row[0]) for row in (HEADER, *rows))
    pattern_width = max(len(row[1]) for row in (HEADER, *rows))
    lines = [
        f"{method:<{method_width}}  {pattern:<{pattern_width}}  {handler}"
        for method, pattern, handler in (HEADER, *rows)
    ]
    lines.insert(1, "-" * min(max(len(line) for line in lines), 80))
    print("\n".join(lines))
