"""Data models for the route compiler.

Immutable frozen dataclasses representing scanned files, route files,
path segments, compiled routes, and the ranked route table.  Every
compilation pass rebuilds all of them from scratch; the only identity
that survives between passes is a file's relative path.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path, PurePosixPath
from typing import NamedTuple

from burrow.methods import Method, ordered


@dataclass(frozen=True, slots=True)
class SourceFile:
    """A candidate route file found by the scanner.

    Attributes:
        absolute_path: Resolved filesystem path.
        relative_path: POSIX-style path relative to the routes root,
            extension included (e.g. ``users/[id].py``).
    """

    absolute_path: Path
    relative_path: str

    @property
    def module_path(self) -> str:
        """Relative path with the extension stripped (``users/[id]``)."""
        return str(PurePosixPath(self.relative_path).with_suffix(""))


@dataclass(frozen=True, slots=True)
class RouteFile:
    """A source file that exports at least one of ``GET`` / ``POST``.

    Attributes:
        absolute_path: Resolved filesystem path.
        relative_path: POSIX-style path relative to the routes root.
        exported_methods: Every method token the module binds, not just
            the two that made it eligible.
        has_middleware: True if the module binds ``middleware``.
    """

    absolute_path: Path
    relative_path: str
    exported_methods: frozenset[Method]
    has_middleware: bool = False

    @property
    def module_path(self) -> str:
        return str(PurePosixPath(self.relative_path).with_suffix(""))

    @property
    def methods(self) -> tuple[Method, ...]:
        """Exported methods in canonical registration order."""
        return ordered(self.exported_methods)


class SegmentKind(IntEnum):
    """Segment kinds, ordered from most to least specific."""

    STATIC = 0
    DYNAMIC = 1
    CATCH_ALL = 2


@dataclass(frozen=True, slots=True)
class StaticSegment:
    """A literal path component: ``about`` -> ``/about``."""

    literal: str

    @property
    def kind(self) -> SegmentKind:
        return SegmentKind.STATIC

    def render(self) -> str:
        return self.literal


@dataclass(frozen=True, slots=True)
class DynamicSegment:
    """A single-component parameter: ``[id]`` -> ``:id``."""

    name: str

    @property
    def kind(self) -> SegmentKind:
        return SegmentKind.DYNAMIC

    def render(self) -> str:
        return f":{self.name}"


@dataclass(frozen=True, slots=True)
class CatchAllSegment:
    """A trailing multi-component wildcard: ``[...path]`` -> ``*``."""

    name: str

    @property
    def kind(self) -> SegmentKind:
        return SegmentKind.CATCH_ALL

    def render(self) -> str:
        return "*"


type PathSegment = StaticSegment | DynamicSegment | CatchAllSegment


class SpecificityKey(NamedTuple):
    """Sort key for route precedence; smaller sorts first.

    Attributes:
        kind: Least specific segment kind present in the route.
        depth: Negated segment count, so deeper routes sort first.
        pattern: The URL pattern, for a total, reproducible order.
    """

    kind: SegmentKind
    depth: int
    pattern: str


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """A route file compiled into typed segments and a URL pattern.

    Attributes:
        source: The route file this was compiled from.
        segments: Typed path segments, left to right.
        url_pattern: Registration pattern (e.g. ``/users/:id``).
        param_names: Captured parameter names, left to right.
        specificity_key: Cached precedence key, computed once.
        shape: ``url_pattern`` with parameter names erased
            (``/users/:param``); two routes with the same shape match
            exactly the same URLs and therefore conflict.
    """

    source: RouteFile
    segments: tuple[PathSegment, ...]
    url_pattern: str
    param_names: tuple[str, ...]
    specificity_key: SpecificityKey
    shape: str

    @property
    def kind(self) -> SegmentKind:
        return self.specificity_key.kind

    @property
    def catch_all_param(self) -> str | None:
        """Name of the trailing ``[...name]`` segment, if there is one."""
        if self.segments and isinstance(self.segments[-1], CatchAllSegment):
            return self.segments[-1].name
        return None


@dataclass(frozen=True, slots=True)
class RouteTable:
    """Ranked, conflict-free sequence of compiled routes.

    Order is match order: the host should try entries first to last and
    stop at the first match.  Never mutated; a recompilation builds a
    new table.
    """

    routes: tuple[CompiledRoute, ...] = ()
    root: Path | None = None  # Routes directory the table was compiled from

    def __iter__(self) -> Iterator[CompiledRoute]:
        return iter(self.routes)

    def __len__(self) -> int:
        return len(self.routes)

    def __getitem__(self, index: int) -> CompiledRoute:
        return self.routes[index]

    @property
    def patterns(self) -> list[str]:
        """URL patterns in rank order."""
        return [route.url_pattern for route in self.routes]
