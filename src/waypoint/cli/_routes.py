"""``waypoint routes``, ``waypoint match`` and ``waypoint url``.

Each command resolves an import string to an App and reads its route
table; none of them dispatch a request.
"""

import argparse
import sys

from waypoint.app import App
from waypoint.cli._resolve import resolve_app
from waypoint.errors import UnknownRouteNameError


def _load(import_string: str) -> App:
    try:
        return resolve_app(import_string)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


def _target_name(target: object) -> str:
    return getattr(target, "__name__", repr(target))


def run_routes(args: argparse.Namespace) -> None:
    """Print a table of METHODS, PATTERN, NAME and TARGET, in match order."""
    app = _load(args.app)

    routes = app.routes
    if not routes:
        print("No routes registered.")
        return

    rows = [
        (route.methods, route.pattern, route.name or "", _target_name(route.target))
        for route in routes
    ]
    headers = ("METHODS", "PATTERN", "NAME", "TARGET")
    widths = [max(len(header), *(len(row[i]) for row in rows)) for i, header in enumerate(headers)]

    fmt = "  ".join(f"{{:<{width}}}" for width in widths[:-1]) + "  {}"
    print(fmt.format(*headers))
    print("-" * min(sum(widths) + 6, 80))
    for row in rows:
        print(fmt.format(*row))


def run_match(args: argparse.Namespace) -> None:
    """Print the route a request would hit and its params; exit 1 on no match."""
    app = _load(args.app)

    match = app.match(args.path, args.method)
    if match is None:
        print(f"No route matches {args.method.upper()} {args.path}")
        raise SystemExit(1)

    print(f"{match.route.methods} {match.route.pattern} -> {_target_name(match.target)}")
    if match.name:
        print(f"name: {match.name}")
    for key, value in match.params.items():
        print(f"  {key} = {value}")


def run_url(args: argparse.Namespace) -> None:
    """Print the URL for a named route built from ``key=value`` arguments."""
    app = _load(args.app)

    params: dict[str, str] = {}
    for item in args.params:
        key, sep, value = item.partition("=")
        if not sep:
            print(f"Error: expected key=value, got {item!r}", file=sys.stderr)
            raise SystemExit(2)
        params[key] = value

    try:
        print(app.url_for(args.name, **params))
    except UnknownRouteNameError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
