"""Runtime helpers shared by generated modules and the dynamic registrar.

A route module is a plain Python file.  It exposes handlers as
module-level callables named after HTTP methods and, optionally, a
``middleware`` mapping::

    # routes/users/[id].py
    async def GET(request): ...
    async def DELETE(request): ...

    middleware = {"DELETE": [require_admin]}

:func:`route_handlers` turns such a module into an explicit
:class:`RouteHandlers` value (closed :class:`~burrow.methods.Method`
keys, validated middleware), so nothing downstream pokes at arbitrary
module attributes.

Middleware follows the familiar shape::

    async def require_admin(request, next):
        ...
        return await next(request)

The first middleware listed is the outermost.

Catch-all routes receive the rest of the request path, split on ``/``,
under the catch-all's parameter name::

    # routes/articles/[...slug].py, requested as /articles/2024/intro
    async def GET(request, slug):
        assert slug == ["2024", "intro"]
"""

import importlib.util
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from types import ModuleType
from typing import Any

from burrow._internal.invoke import invoke
from burrow._internal.types import Handler, Middleware
from burrow.errors import RouteLoadError
from burrow.methods import ALL_METHODS, MIDDLEWARE_EXPORT, Method

# Prefix for route modules registered in sys.modules
MODULE_PREFIX = "burrow_routes"


@dataclass(frozen=True, slots=True)
class RouteHandlers:
    """The handlers and middleware one route module provides.

    Attributes:
        handlers: Handler per exported method.
        middleware: Middleware chain per method, outermost first.
            Methods without middleware are absent.
    """

    handlers: Mapping[Method, Handler] = field(default_factory=dict)
    middleware: Mapping[Method, tuple[Middleware, ...]] = field(default_factory=dict)

    def wrapped(
        self,
        method: Method,
        *,
        pattern: str | None = None,
        catch_all: str | None = None,
    ) -> Handler:
        """The handler for *method* with its middleware chain applied.

        With *catch_all* set, the handler registered on *pattern* also
        receives the remaining path segments under that keyword.
        """
        handler = self.handlers[method]
        if catch_all is not None and pattern is not None:
            handler = pass_segments(handler, pattern, catch_all)
        chain = self.middleware.get(method, ())
        if not chain:
            return handler
        return apply_middleware(handler, chain)


def module_name_for(relative_path: str) -> str:
    """Stable ``sys.modules`` key for a route file.

    ``users/[id].py`` -> ``burrow_routes.users.[id]``
    """
    parts = PurePosixPath(relative_path).with_suffix("").parts
    return ".".join((MODULE_PREFIX, *parts))


def load_route_module(path: str | Path, name: str | None = None) -> ModuleType:
    """Import a route file by path, without touching ``sys.path``.

    Route files are not importable by dotted name (``[id].py`` is not an
    identifier), so they are loaded with
    ``importlib.util.spec_from_file_location``.  The module is registered
    in ``sys.modules`` under *name* so dataclasses and pickling inside
    route files behave.  Loading the same path again re-executes it.

    Raises:
        RouteLoadError: If the module cannot be found or raises while
            executing.  The original exception is chained.
    """
    path = Path(path)
    module_name = name or f"{MODULE_PREFIX}.{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        msg = f"Cannot load route module {path}"
        raise RouteLoadError(msg, path=path)

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        msg = f"Failed to load route module {path}: {exc}"
        raise RouteLoadError(msg, path=path) from exc
    return module


def route_handlers(module: ModuleType) -> RouteHandlers:
    """Collect a module's method handlers and middleware.

    Raises:
        RouteLoadError: If ``middleware`` is not a mapping, names an
            unknown method, or holds something that isn't callable.
    """
    handlers: dict[Method, Handler] = {}
    for method in ALL_METHODS:
        func = getattr(module, method.value, None)
        if func is not None and callable(func):
            handlers[method] = func

    declared = getattr(module, MIDDLEWARE_EXPORT, None)
    middleware: dict[Method, tuple[Middleware, ...]] = {}
    if declared is not None:
        source = getattr(module, "__file__", None) or module.__name__
        if not isinstance(declared, Mapping):
            msg = f"{source}: 'middleware' must be a mapping of method to middleware"
            raise RouteLoadError(msg, path=source)
        for key, value in declared.items():
            method = _coerce_method(key, source)
            chain = (value,) if callable(value) else tuple(value)
            for mw in chain:
                if not callable(mw):
                    msg = f"{source}: middleware for {method} must be callable, got {type(mw).__name__}"
                    raise RouteLoadError(msg, path=source)
            if chain:
                middleware[method] = chain

    return RouteHandlers(handlers=handlers, middleware=middleware)


def with_middleware(
    module: ModuleType,
    method: str,
    pattern: str | None = None,
    catch_all: str | None = None,
) -> Handler:
    """The module's *method* handler wrapped in its declared middleware.

    Used by generated route modules for files that declare
    ``middleware`` and for catch-all routes.
    """
    return route_handlers(module).wrapped(Method(method), pattern=pattern, catch_all=catch_all)


def pass_segments(handler: Handler, pattern: str, name: str) -> Handler:
    """Call *handler* with the path below *pattern* as ``name=[...]``.

    ``/files/*`` requested as ``/files/a/b.txt`` gives ``["a", "b.txt"]``.
    The path is read from ``request.path``, or from the request itself
    when it is a string.  A value the caller already passed under *name*
    is left alone.
    """
    # "/files/*" -> strip "/files/"
    prefix = len(pattern) - 1

    async def wrapper(request: Any, *args: Any, **kwargs: Any) -> Any:
        if name not in kwargs:
            kwargs[name] = request_path(request)[prefix:].split("/")
        return await invoke(handler, request, *args, **kwargs)

    wrapper.__name__ = getattr(handler, "__name__", "handler")
    wrapper.__qualname__ = getattr(handler, "__qualname__", wrapper.__name__)
    wrapper.__wrapped__ = handler  # type: ignore[attr-defined]
    return wrapper


def request_path(request: Any) -> str:
    """The URL path of *request*: ``request.path``, or the string itself."""
    if isinstance(request, str):
        return request
    path = getattr(request, "path", None)
    if not isinstance(path, str):
        msg = f"Cannot read a URL path from {type(request).__name__}; catch-all routes need request.path"
        raise TypeError(msg)
    return path


def apply_middleware(handler: Handler, chain: tuple[Middleware, ...]) -> Handler:
    """Wrap *handler* so each request passes through *chain* first.

    Extra positional and keyword arguments given to the wrapper are
    forwarded to the handler unchanged; middleware only sees the request.
    """

    async def wrapper(request: Any, *args: Any, **kwargs: Any) -> Any:
        async def endpoint(req: Any) -> Any:
            return await invoke(handler, req, *args, **kwargs)

        call_next: Callable[[Any], Any] = endpoint
        for mw in reversed(chain):
            call_next = _link(mw, call_next)
        return await call_next(request)

    wrapper.__name__ = getattr(handler, "__name__", "handler")
    wrapper.__qualname__ = getattr(handler, "__qualname__", wrapper.__name__)
    wrapper.__wrapped__ = handler  # type: ignore[attr-defined]
    return wrapper


def _link(mw: Middleware, call_next: Callable[[Any], Any]) -> Callable[[Any], Any]:
    async def step(request: Any) -> Any:
        return await invoke(mw, request, call_next)

    return step


def _coerce_method(key: object, source: str) -> Method:
    try:
        return Method(str(key).upper())
    except ValueError:
        msg = f"{source}: unknown method {key!r} in middleware"
        raise RouteLoadError(msg, path=source) from None
