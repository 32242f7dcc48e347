"""Burrow — file-based route table compiler.

Turns a directory of route modules into an ordered, conflict-free route
table and emits the code that registers it on a host router.

Conventions::

    routes/
      index.py             # /
      about.py             # /about
      users/
        index.py           # /users
        [id].py            # /users/:id
        [...path].py       # /users/*

A route module exports handlers named after HTTP methods::

    async def GET(request): ...
    async def POST(request): ...

Build-time generation::

    from burrow import CompilerConfig, build

    build(CompilerConfig(routes_dir="routes", output="routes_generated.py"))

Startup-time registration::

    from burrow import register_routes

    await register_routes(router, "routes")
"""

__version__ = "0.1.0.dev0"
__all__ = [
    "BurrowError",
    "CompileError",
    "CompiledRoute",
    "CompilerConfig",
    "ConfigurationError",
    "DevConfig",
    "Method",
    "RouteCollector",
    "RouteConflictError",
    "RouteTable",
    "RouteWatcher",
    "build",
    "compile_table",
    "register_routes",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import burrow`` cheap for generated modules, which only need
    :mod:`burrow.runtime`.
    """
    if name in ("CompilerConfig", "DevConfig"):
        from burrow import config as _config

        return getattr(_config, name)

    if name in ("build", "compile_table", "register_routes"):
        from burrow import pipeline as _pipeline

        return getattr(_pipeline, name)

    if name in ("CompiledRoute", "RouteTable"):
        from burrow import types as _types

        return getattr(_types, name)

    if name == "Method":
        from burrow.methods import Method

        return Method

    if name == "RouteCollector":
        from burrow.registrar import RouteCollector

        return RouteCollector

    if name == "RouteWatcher":
        from burrow.watch import RouteWatcher

        return RouteWatcher

    if name in ("BurrowError", "CompileError", "ConfigurationError", "RouteConflictError"):
        from burrow import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
