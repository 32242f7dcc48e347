"""Burrow CLI — generate, list, verify, and watch route tables.

Entry point registered as ``burrow`` in ``pyproject.toml``::

    [project.scripts]
    burrow = "burrow.cli:main"
"""

import argparse
import sys

from burrow.cli._options import add_compiler_arguments


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``burrow`` command."""
    parser = argparse.ArgumentParser(
        prog="burrow",
        description="Burrow — compile a routes directory into a ranked route table.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- burrow build -----------------------------------------------------
    build_parser = subparsers.add_parser("build", help="Generate the routes module")
    add_compiler_arguments(build_parser)
    build_parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the generated module instead of writing it",
    )

    # -- burrow routes ----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List routes in match order")
    add_compiler_arguments(routes_parser)

    # -- burrow check -----------------------------------------------------
    check_parser = subparsers.add_parser(
        "check",
        help="Verify a generated routes module is up to date",
    )
    add_compiler_arguments(check_parser)

    # -- burrow watch -----------------------------------------------------
    watch_parser = subparsers.add_parser("watch", help="Regenerate on every change")
    add_compiler_arguments(watch_parser)
    watch_parser.add_argument(
        "--debounce",
        type=int,
        default=50,
        help="Milliseconds to wait for changes to settle (default: 50)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "build":
        from burrow.cli._build import run_build

        run_build(args)
    elif args.command == "routes":
        from burrow.cli._routes import run_routes

        run_routes(args)
    elif args.command == "check":
        from burrow.cli._check import run_check

        run_check(args)
    elif args.command == "watch":
        from burrow.cli._watch import run_watch

        run_watch(args)
