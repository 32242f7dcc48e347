"""Specificity ranking — the order in which the host tries routes.

Registration order alone gives the host framework correct precedence,
so the table is sorted once, at compile time, by a three-level key:

1. Segment kind: all-static routes, then routes with a dynamic
   segment, then routes with a catch-all.
2. Depth: more segments before fewer.
3. The URL pattern, lexically, so the order is total and identical
   across runs and platforms.

Two equally specific dynamic routes (``/a/:id`` and ``/b/:slug``) are
ordered by step 3 only; no attempt is made to rank parameter names.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from burrow.errors import RouteConflictError
from burrow.types import CompiledRoute, PathSegment, RouteTable, SegmentKind, SpecificityKey

logger = logging.getLogger("burrow.compile")


def specificity_key(segments: tuple[PathSegment, ...], url_pattern: str) -> SpecificityKey:
    """Build the sort key for a route; smaller sorts first."""
    kind = max((seg.kind for seg in segments), default=SegmentKind.STATIC)
    return SpecificityKey(kind=kind, depth=-len(segments), pattern=url_pattern)


def rank_routes(routes: Iterable[CompiledRoute]) -> list[CompiledRoute]:
    """Sort routes by their cached specificity key."""
    return sorted(routes, key=lambda route: route.specificity_key)


def find_conflicts(routes: Iterable[CompiledRoute]) -> list[tuple[CompiledRoute, CompiledRoute]]:
    """Pairs of routes whose patterns match exactly the same URLs.

    Each pair is ``(earlier, later)`` in the iteration order of *routes*.
    """
    seen: dict[str, CompiledRoute] = {}
    conflicts: list[tuple[CompiledRoute, CompiledRoute]] = []
    for route in routes:
        first = seen.get(route.shape)
        if first is not None:
            conflicts.append((first, route))
        else:
            seen[route.shape] = route
    return conflicts


def build_route_table(routes: Iterable[CompiledRoute], *, root: Path | None = None) -> RouteTable:
    """Rank *routes* and check the result for duplicate patterns.

    Raises:
        RouteConflictError: Two routes match the same URLs.  Both source
            files and the shared pattern are named.
    """
    ranked = rank_routes(routes)
    conflicts = find_conflicts(ranked)
    if conflicts:
        first, second = conflicts[0]
        a, b = sorted((first.source.relative_path, second.source.relative_path))
        raise RouteConflictError(first.shape, a, b)

    logger.debug("Ranked %d routes", len(ranked))
    return RouteTable(tuple(ranked), root=root)
