"""Path pattern compiler — file paths to typed URL segments.

The directory layout is the route syntax::

    index.py               -> /
    about.py               -> /about
    users/index.py         -> /users
    users/[id].py          -> /users/:id
    files/[...path].py     -> /files/*

A trailing ``index`` contributes no segment, so ``users/index.py`` and
``users.py`` compile to the same pattern and are reported as a conflict
by the ranker instead of being merged.
"""

import logging
import re
from pathlib import PurePosixPath

from burrow.errors import CatchAllPositionError, DuplicateParameterError
from burrow.ranking import specificity_key
from burrow.types import (
    CatchAllSegment,
    CompiledRoute,
    DynamicSegment,
    PathSegment,
    RouteFile,
    SegmentKind,
    StaticSegment,
)

logger = logging.getLogger("burrow.compile")

_CATCH_ALL_RE = re.compile(r"^\[\.\.\.(\w+)\]$")
_DYNAMIC_RE = re.compile(r"^\[(\w+)\]$")

_INDEX = "index"

# Placeholder used in pattern shapes, where parameter names don't matter
_SHAPE_PARAM = ":param"


def classify_segment(component: str) -> PathSegment:
    """Classify one path component.

    Examples::

        "users"      -> StaticSegment("users")
        "[id]"       -> DynamicSegment("id")
        "[...path]"  -> CatchAllSegment("path")
    """
    match = _CATCH_ALL_RE.match(component)
    if match:
        return CatchAllSegment(match.group(1))
    match = _DYNAMIC_RE.match(component)
    if match:
        return DynamicSegment(match.group(1))
    return StaticSegment(component)


def split_components(module_path: str) -> list[str]:
    """Split an extension-less relative path, dropping a trailing ``index``."""
    components = [part for part in PurePosixPath(module_path).parts if part not in ("", ".")]
    if components and components[-1] == _INDEX:
        components.pop()
    return components


def compile_path(module_path: str) -> tuple[tuple[PathSegment, ...], str, tuple[str, ...]]:
    """Compile an extension-less relative path.

    Returns:
        ``(segments, url_pattern, param_names)``.

    Raises:
        CatchAllPositionError: A catch-all segment is not last.
        DuplicateParameterError: A parameter name repeats.
    """
    segments = tuple(classify_segment(c) for c in split_components(module_path))

    param_names: list[str] = []
    last = len(segments) - 1
    for i, seg in enumerate(segments):
        if isinstance(seg, CatchAllSegment) and i != last:
            msg = (
                f"{module_path}: catch-all segment '[...{seg.name}]' must be "
                f"the last path component"
            )
            raise CatchAllPositionError(msg, path=module_path)
        if isinstance(seg, (DynamicSegment, CatchAllSegment)):
            if seg.name in param_names:
                msg = f"{module_path}: parameter {seg.name!r} is captured more than once"
                raise DuplicateParameterError(msg, path=module_path)
            param_names.append(seg.name)

    return segments, render_pattern(segments), tuple(param_names)


def render_pattern(segments: tuple[PathSegment, ...]) -> str:
    """Join segments into a URL pattern (``/users/:id``, ``/files/*``)."""
    return "/" + "/".join(seg.render() for seg in segments)


def pattern_shape(segments: tuple[PathSegment, ...]) -> str:
    """Pattern with parameter names erased (``/users/:param``).

    Two routes with equal shapes match exactly the same URLs.
    """
    parts = [_SHAPE_PARAM if seg.kind is SegmentKind.DYNAMIC else seg.render() for seg in segments]
    return "/" + "/".join(parts)


def compile_route(route_file: RouteFile) -> CompiledRoute:
    """Compile a :class:`RouteFile` into a :class:`CompiledRoute`.

    The specificity key is computed here, once, and cached on the route.
    """
    try:
        segments, url_pattern, param_names = compile_path(route_file.module_path)
    except (CatchAllPositionError, DuplicateParameterError) as exc:
        # Report the file as the user sees it, extension included
        exc.path = route_file.relative_path
        raise

    return CompiledRoute(
        source=route_file,
        segments=segments,
        url_pattern=url_pattern,
        param_names=param_names,
        specificity_key=specificity_key(segments, url_pattern),
        shape=pattern_shape(segments),
    )


def compile_routes(route_files: list[RouteFile]) -> list[CompiledRoute]:
    """Compile every route file; the first error aborts the pass."""
    compiled = [compile_route(f) for f in route_files]
    logger.debug("Compiled %d routes", len(compiled))
    return compiled
