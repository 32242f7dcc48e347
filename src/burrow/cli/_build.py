"""``burrow build`` — generate the routes module."""

import argparse

from burrow.cli._options import config_from_args, guarded
from burrow.log import configure_logging
from burrow.pipeline import build


def run_build(args: argparse.Namespace) -> None:
    """Compile the routes directory and write (or print) the module.

    With ``--stdout`` the module is printed and nothing is written.
    """
    configure_logging(verbose=args.verbose)
    if args.stdout:
        config = config_from_args(args, write=False, callback=lambda content: print(content, end=""))
    else:
        config = config_from_args(args)
    artifact = guarded(lambda: build(config))
    if not args.stdout:
        print(f"{len(artifact.routes)} routes -> {config.output}")
