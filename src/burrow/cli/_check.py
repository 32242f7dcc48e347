"""``burrow check`` — verify the generated module matches the tree.

Reads the existing generated module, recovers its registration calls,
and compares them with a fresh compile.  Exits with code 1 if the
module is missing or stale, so it can gate CI.
"""

import argparse
import sys
from pathlib import Path

from burrow.cli._options import config_from_args, guarded
from burrow.emitters.static import parse_registrations
from burrow.log import configure_logging
from burrow.pipeline import generate


def run_check(args: argparse.Namespace) -> None:
    configure_logging(verbose=args.verbose)
    config = config_from_args(args)
    output = Path(config.output)
    if not output.is_file():
        print(f"Error: {output} does not exist. Run `burrow build` first.", file=sys.stderr)
        raise SystemExit(1)

    current = output.read_text(encoding="utf-8")
    expected = guarded(lambda: generate(config))

    if current == expected.content:
        print(f"{output} is up to date ({len(expected.routes)} routes).")
        return

    have = guarded(lambda: parse_registrations(current))
    want = parse_registrations(expected.content)
    print(f"{output} is out of date. Run `burrow build`.", file=sys.stderr)
    for reg in want:
        if reg not in have:
            print(f"  + {reg.method} {reg.pattern}  ({reg.module})", file=sys.stderr)
    for reg in have:
        if reg not in want:
            print(f"  - {reg.method} {reg.pattern}  ({reg.module})", file=sys.stderr)
    if [r for r in have if r in want] != [r for r in want if r in have]:
        print("  ~ registration order changed", file=sys.stderr)
    raise SystemExit(1)
