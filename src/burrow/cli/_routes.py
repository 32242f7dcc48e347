"""``burrow routes`` — list compiled routes in match order.

Prints a table of PATTERN, METHODS, and source FILE.  The first row
that matches a URL is the one the host will dispatch to.
"""

import argparse

from burrow.cli._options import config_from_args, guarded
from burrow.log import configure_logging
from burrow.pipeline import compile_table


def run_routes(args: argparse.Namespace) -> None:
    configure_logging(verbose=args.verbose)
    config = config_from_args(args)
    table = guarded(lambda: compile_table(config))

    if not len(table):
        print("No routes found.")
        return

    # Build rows: (pattern, methods_str, file)
    rows: list[tuple[str, str, str]] = [
        (
            route.url_pattern,
            ", ".join(route.source.methods),
            route.source.relative_path,
        )
        for route in table
    ]

    # Column widths
    max_pattern = max(max(len(r[0]) for r in rows), 7)  # "PATTERN" header
    max_methods = max(max(len(r[1]) for r in rows), 7)  # "METHODS" header

    fmt = f"{{:<{max_pattern}}}  {{:<{max_methods}}}  {{}}"
    print(fmt.format("PATTERN", "METHODS", "FILE"))
    sep_len = max_pattern + max_methods + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for pattern, methods_str, file in rows:
        print(fmt.format(pattern, methods_str, file))
