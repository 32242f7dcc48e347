"""The compile pipeline: scan -> extract -> compile -> rank -> emit.

Each pass rebuilds everything from the filesystem.  The core stages are
synchronous; callers that live on an event loop (the watcher, the
dynamic registrar) push :func:`compile_table` into a worker thread.

Build-time usage::

    from burrow import CompilerConfig
    from burrow.pipeline import build

    build(CompilerConfig(routes_dir="app/routes", output="app/routes_generated.py"))

Startup-time usage, no generated file::

    from burrow.pipeline import register_routes

    await register_routes(router, "app/routes")
"""

import logging
from pathlib import Path

from anyio import to_thread

from burrow.compiler import compile_routes
from burrow.config import CompilerConfig
from burrow.emitters.base import StaticArtifact
from burrow.emitters.dynamic import DynamicEmitter
from burrow.emitters.sinks import sink_for
from burrow.emitters.static import StaticEmitter
from burrow.extraction import extract_route_files
from burrow.ranking import build_route_table
from burrow.registrar import Registrar
from burrow.scanning import scan_directory
from burrow.types import RouteTable

logger = logging.getLogger("burrow.compile")


def compile_table(config: CompilerConfig) -> RouteTable:
    """Scan, extract, compile, and rank the routes directory.

    Raises:
        ConfigurationError: Invalid configuration or missing directory.
        CompileError: Misplaced catch-all, repeated parameter, or a
            pattern conflict.
        RouteLoadError: A route module could not be parsed or imported.
    """
    config.validate()
    sources = scan_directory(
        config.routes_dir,
        externals=config.externals,
        extensions=config.extensions,
    )
    route_files = extract_route_files(sources, strategy=config.strategy)
    compiled = compile_routes(route_files)
    table = build_route_table(compiled, root=Path(config.routes_dir).resolve())
    logger.debug(
        "Compiled %s: %d of %d files are routes",
        config.routes_dir,
        len(table),
        len(sources),
    )
    return table


def generate(config: CompilerConfig, table: RouteTable | None = None) -> StaticArtifact:
    """Render the static artifact for *config* without delivering it."""
    if table is None:
        table = compile_table(config)
    emitter = StaticEmitter(config.output, annotations=config.annotations, verbose=config.verbose)
    return emitter.emit(table)


def build(config: CompilerConfig) -> StaticArtifact:
    """Compile and deliver the static artifact.

    Writes ``config.output`` when ``config.write`` is set, otherwise
    passes the content to ``config.callback``.  Nothing is delivered if
    compilation fails, so an existing artifact stays intact.
    """
    sink = sink_for(config.output, write=config.write, callback=config.callback)
    artifact = generate(config)
    sink.deliver(artifact.content)
    return artifact


async def register_routes(
    router: Registrar,
    routes_dir: str | Path = "routes",
    *,
    externals: tuple[str, ...] = (),
    verbose: bool = False,
) -> RouteTable:
    """Compile *routes_dir* and register its GET/POST handlers on *router*.

    Modules are imported sequentially in rank order.  Returns the table
    that was registered.
    """
    config = CompilerConfig(routes_dir=routes_dir, externals=externals, verbose=verbose)
    table = await to_thread.run_sync(compile_table, config)
    plan = DynamicEmitter(verbose=verbose).emit(table)
    await plan.register(router)
    return table
