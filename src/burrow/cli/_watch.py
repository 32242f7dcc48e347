"""``burrow watch`` — regenerate the routes module on every change.

Writes to disk; virtual delivery only makes sense inside a host dev
server, which uses :class:`burrow.watch.RouteWatcher` directly.
"""

import argparse

import anyio

from burrow.cli._options import config_from_args, guarded
from burrow.config import DevConfig
from burrow.log import configure_logging
from burrow.watch import RouteWatcher


def run_watch(args: argparse.Namespace) -> None:
    configure_logging(verbose=args.verbose)
    config = config_from_args(args)
    guarded(config.validate)
    dev = DevConfig(compiler=config, virtual_route=False, debounce_ms=args.debounce)
    watcher = RouteWatcher(dev)
    try:
        anyio.run(watcher.run)
    except KeyboardInterrupt:
        print("\nStopped.")
