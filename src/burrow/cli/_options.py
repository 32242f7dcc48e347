"""Shared compiler flags and their translation to ``CompilerConfig``.

Used by every ``burrow`` subcommand so flags mean the same thing
everywhere.
"""

import argparse
import sys
from collections.abc import Callable
from typing import NoReturn

from burrow.config import CompilerConfig
from burrow.errors import BurrowError


def add_compiler_arguments(parser: argparse.ArgumentParser) -> None:
    """Register ``--dir``, ``--output``, ``--exclude`` and friends."""
    parser.add_argument("--dir", default="routes", help="Routes directory (default: routes)")
    parser.add_argument(
        "--output",
        default="routes_generated.py",
        help="Generated module path (default: routes_generated.py)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="GLOB",
        help="Exclude files matching GLOB (repeatable)",
    )
    parser.add_argument(
        "--strategy",
        choices=("static", "dynamic"),
        default="static",
        help="Find handlers by reading source (static) or importing modules (dynamic)",
    )
    parser.add_argument(
        "--no-annotations",
        action="store_true",
        help="Omit type hints from the generated module",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every registration")


def config_from_args(args: argparse.Namespace, **overrides: object) -> CompilerConfig:
    """Build a ``CompilerConfig`` from parsed CLI flags."""
    values: dict[str, object] = {
        "routes_dir": args.dir,
        "output": args.output,
        "externals": tuple(args.exclude),
        "strategy": args.strategy,
        "annotations": not args.no_annotations,
        "verbose": args.verbose,
    }
    values.update(overrides)
    return CompilerConfig(**values)  # type: ignore[arg-type]


def fail(exc: BurrowError) -> NoReturn:
    """Print a burrow error and exit with status 1."""
    print(f"Error: {exc}", file=sys.stderr)
    raise SystemExit(1) from exc


def guarded[T](func: Callable[[], T]) -> T:
    """Run *func*, turning any ``BurrowError`` into exit status 1."""
    try:
        return func()
    except BurrowError as exc:
        fail(exc)
