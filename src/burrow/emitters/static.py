"""Static backend — generated Python source with explicit registrations.

The generated module loads every route module at import time and
exposes one entry point::

    from routes_generated import register_routes

    register_routes(router)

Each included route gets one load statement and one
``router.add_route`` call per exported method, all seven method tokens
included, in rank order.  Handlers of files declaring ``middleware``,
and of catch-all routes, are wrapped with
:func:`burrow.runtime.with_middleware`.

:func:`parse_registrations` reads the calls back out of generated
source, which is how ``burrow check`` detects a stale artifact.
"""

import ast
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from kida import DictLoader, Environment

from burrow.emitters.base import StaticArtifact, log_registration
from burrow.emitters.templates import TEMPLATES
from burrow.errors import BurrowError
from burrow.runtime import module_name_for
from burrow.types import CompiledRoute, RouteTable


@dataclass(frozen=True, slots=True)
class _Call:
    method: str
    pattern: str
    handler: str


@dataclass(frozen=True, slots=True)
class _RouteContext:
    alias: str
    locator: str
    module_name: str
    calls: tuple[_Call, ...]


@dataclass(frozen=True, slots=True)
class ParsedRegistration:
    """One ``router.add_route`` call recovered from generated source.

    Attributes:
        method: HTTP method string.
        pattern: URL pattern string.
        module: Route file path relative to the routes directory.
    """

    method: str
    pattern: str
    module: str


def _create_environment() -> Environment:
    return Environment(
        loader=DictLoader(TEMPLATES),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )


class StaticEmitter:
    """Renders a route table into a self-contained Python module.

    Args:
        output: Where the generated module will live.  Only its parent
            directory matters: route files are located relative to it.
        annotations: Emit type hints in the generated module.
        verbose: Log each registration at INFO level.
    """

    __slots__ = ("_env", "annotations", "output", "verbose")

    def __init__(
        self,
        output: str | Path = "routes_generated.py",
        *,
        annotations: bool = True,
        verbose: bool = False,
    ) -> None:
        self.output = Path(output)
        self.annotations = annotations
        self.verbose = verbose
        self._env = _create_environment()

    def emit(self, table: RouteTable) -> StaticArtifact:
        routes = [self._route_context(i, route) for i, route in enumerate(table)]
        template = self._env.get_template("routes.py")
        rendered = template.render(
            {
                "annotations": self.annotations,
                "wraps_handlers": any(_wraps_handlers(r) for r in table),
                "routes_dir": repr(self._routes_dir(table)),
                "routes": routes,
            }
        )
        return StaticArtifact(content=_normalize(rendered), routes=tuple(table))

    def _route_context(self, index: int, route: CompiledRoute) -> _RouteContext:
        alias = f"_route_{index}"
        calls = []
        catch_all = route.catch_all_param
        for method in route.source.methods:
            if catch_all is not None:
                handler = f"with_middleware({alias}, {method.value!r}, {route.url_pattern!r}, {catch_all!r})"
            elif route.source.has_middleware:
                handler = f"with_middleware({alias}, {method.value!r})"
            else:
                handler = f"{alias}.{method.value}"
            calls.append(_Call(repr(method.value), repr(route.url_pattern), handler))
            log_registration(method.value, route, verbose=self.verbose)
        return _RouteContext(
            alias=alias,
            locator=repr(route.source.relative_path),
            module_name=repr(module_name_for(route.source.relative_path)),
            calls=tuple(calls),
        )

    def _routes_dir(self, table: RouteTable) -> str:
        """Routes directory relative to the output's directory, POSIX style."""
        root = (table.root or Path("routes")).resolve()
        out_dir = self.output.resolve().parent
        try:
            relative = os.path.relpath(root, out_dir)
        except ValueError:
            # Different drives on Windows; nothing relative exists
            return root.as_posix()
        return PurePosixPath(*Path(relative).parts).as_posix()


def _wraps_handlers(route: CompiledRoute) -> bool:
    return route.source.has_middleware or route.catch_all_param is not None


def _normalize(rendered: str) -> str:
    lines = [line.rstrip() for line in rendered.splitlines()]
    return "\n".join(lines).strip("\n") + "\n"


def parse_registrations(content: str) -> list[ParsedRegistration]:
    """Recover the registration calls from generated source, in order.

    Raises:
        BurrowError: If *content* is not a generated routes module.
    """
    try:
        tree = ast.parse(content)
    except SyntaxError as exc:
        msg = f"Generated routes module does not parse: {exc}"
        raise BurrowError(msg) from exc

    modules: dict[str, str] = {}
    register: ast.FunctionDef | None = None
    for node in tree.body:
        if isinstance(node, ast.Assign) and len(node.targets) == 1:
            target = node.targets[0]
            locator = _load_locator(node.value)
            if isinstance(target, ast.Name) and locator is not None:
                modules[target.id] = locator
        elif isinstance(node, ast.FunctionDef) and node.name == "register_routes":
            register = node

    if register is None:
        raise BurrowError("Generated routes module has no register_routes() function")

    found: list[ParsedRegistration] = []
    for stmt in register.body:
        if not isinstance(stmt, ast.Expr) or not isinstance(stmt.value, ast.Call):
            continue
        call = stmt.value
        if not (isinstance(call.func, ast.Attribute) and call.func.attr == "add_route"):
            continue
        if len(call.args) != 3 or call.keywords:
            msg = f"Line {call.lineno}: add_route() must take exactly (method, pattern, handler)"
            raise BurrowError(msg)
        method, pattern, handler = call.args
        alias = _handler_alias(handler)
        found.append(
            ParsedRegistration(
                method=_literal_str(method, "method"),
                pattern=_literal_str(pattern, "pattern"),
                module=modules.get(alias or "", ""),
            )
        )
    return found


def _literal_str(node: ast.expr, what: str) -> str:
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return node.value
    msg = f"Line {node.lineno}: add_route() {what} must be a string literal"
    raise BurrowError(msg)


def _load_locator(value: ast.expr) -> str | None:
    """``load_route_module(ROUTES_DIR / "x.py", ...)`` -> ``"x.py"``."""
    if not (isinstance(value, ast.Call) and isinstance(value.func, ast.Name)):
        return None
    if value.func.id != "load_route_module" or not value.args:
        return None
    first = value.args[0]
    if isinstance(first, ast.BinOp) and isinstance(first.right, ast.Constant):
        return str(first.right.value)
    return None


def _handler_alias(handler: ast.expr) -> str | None:
    # _route_3.GET
    if isinstance(handler, ast.Attribute) and isinstance(handler.value, ast.Name):
        return handler.value.id
    # with_middleware(_route_3, "GET")
    if isinstance(handler, ast.Call) and handler.args and isinstance(handler.args[0], ast.Name):
        return handler.args[0].id
    return None
