"""Method extraction — which HTTP methods does a route file export?

Two strategies:

``static``
    Parse the file with :mod:`ast` and look at module-level bindings.
    Nothing is executed, so this is what the build step uses.

``dynamic``
    Import the module and check which method names are bound to
    callables.  Catches handlers produced by decorators or factories
    that source inspection cannot prove are callable.

A file is included in the route table only if it exports ``GET`` or
``POST``.  Once included, every exported method among the seven tokens
is recorded; the inclusion gate does not limit what gets registered.
"""

import ast
import logging
from typing import Literal

from burrow.errors import RouteLoadError
from burrow.methods import ALL_METHODS, MIDDLEWARE_EXPORT, Method, is_eligible
from burrow.runtime import load_route_module, module_name_for, route_handlers
from burrow.types import RouteFile, SourceFile

logger = logging.getLogger("burrow.compile")

_METHOD_NAMES = frozenset(m.value for m in ALL_METHODS)


def extract_route_file(
    source: SourceFile,
    *,
    strategy: Literal["static", "dynamic"] = "static",
) -> RouteFile | None:
    """Inspect *source* and build its :class:`RouteFile`.

    Returns ``None`` for files that export neither ``GET`` nor ``POST``.
    Exclusion is not an error and is only logged at debug level.

    Raises:
        RouteLoadError: If the file cannot be parsed (static) or
            imported (dynamic).
    """
    if strategy == "dynamic":
        methods, has_middleware = _inspect_module(source)
    else:
        methods, has_middleware = _inspect_source(source)

    if not is_eligible(methods):
        logger.debug(
            "Excluded %s: exports no GET or POST handler (found: %s)",
            source.relative_path,
            ", ".join(sorted(methods)) or "none",
        )
        return None

    return RouteFile(
        absolute_path=source.absolute_path,
        relative_path=source.relative_path,
        exported_methods=methods,
        has_middleware=has_middleware,
    )


def extract_route_files(
    sources: list[SourceFile],
    *,
    strategy: Literal["static", "dynamic"] = "static",
) -> list[RouteFile]:
    """Extract every eligible route file, preserving scan order."""
    route_files: list[RouteFile] = []
    for source in sources:
        route_file = extract_route_file(source, strategy=strategy)
        if route_file is not None:
            route_files.append(route_file)
    return route_files


def exported_names(tree: ast.Module) -> set[str]:
    """Names bound at module level by *tree*.

    Covers ``def``, ``async def``, ``class``, plain and annotated
    assignments (including tuple unpacking), and ``import ... as``.
    """
    names: set[str] = set()
    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            names.add(node.name)
        elif isinstance(node, ast.Assign):
            for target in node.targets:
                names.update(_target_names(target))
        elif isinstance(node, ast.AnnAssign):
            if node.value is not None:
                names.update(_target_names(node.target))
        elif isinstance(node, (ast.Import, ast.ImportFrom)):
            for alias in node.names:
                if alias.name == "*":
                    continue
                names.add(alias.asname or alias.name.split(".")[0])
    return names


def _target_names(target: ast.expr) -> set[str]:
    if isinstance(target, ast.Name):
        return {target.id}
    if isinstance(target, (ast.Tuple, ast.List)):
        names: set[str] = set()
        for element in target.elts:
            names.update(_target_names(element))
        return names
    return set()


def _inspect_source(source: SourceFile) -> tuple[frozenset[Method], bool]:
    try:
        text = source.absolute_path.read_text(encoding="utf-8")
        tree = ast.parse(text, filename=str(source.absolute_path))
    except (OSError, UnicodeDecodeError, SyntaxError) as exc:
        msg = f"Cannot parse route module {source.relative_path}: {exc}"
        raise RouteLoadError(msg, path=source.relative_path) from exc

    names = exported_names(tree)
    methods = frozenset(Method(name) for name in names & _METHOD_NAMES)
    return methods, MIDDLEWARE_EXPORT in names


def _inspect_module(source: SourceFile) -> tuple[frozenset[Method], bool]:
    module = load_route_module(source.absolute_path, module_name_for(source.relative_path))
    handlers = route_handlers(module)
    return frozenset(handlers.handlers), bool(handlers.middleware)
