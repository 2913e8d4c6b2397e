"""Waypoint CLI — route table inspection.

Entry point registered as ``waypoint`` in ``pyproject.toml``::

    [project.scripts]
    waypoint = "waypoint.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``waypoint`` command."""
    parser = argparse.ArgumentParser(
        prog="waypoint",
        description="Waypoint — bracket-pattern routing for Python web apps.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- waypoint routes --------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- waypoint match ---------------------------------------------------
    match_parser = subparsers.add_parser("match", help="Show which route a request hits")
    match_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    match_parser.add_argument("method", help="HTTP method (e.g. GET)")
    match_parser.add_argument("path", help="Request path, base path included")

    # -- waypoint url -----------------------------------------------------
    url_parser = subparsers.add_parser("url", help="Generate the URL of a named route")
    url_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    url_parser.add_argument("name", help="Route name")
    url_parser.add_argument(
        "params",
        nargs="*",
        metavar="key=value",
        help="Route parameters",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from waypoint.cli._routes import run_routes

        run_routes(args)
    elif args.command == "match":
        from waypoint.cli._routes import run_match

        run_match(args)
    elif args.command == "url":
        from waypoint.cli._routes import run_url

        run_url(args)
