"""Emitter contract and the static artifact value.

Both backends take the same ranked :class:`~burrow.types.RouteTable`
and never scan the filesystem themselves.  They differ in what they
produce and in method coverage:

- :class:`~burrow.emitters.static.StaticEmitter` produces generated
  Python source registering *every* exported method.
- :class:`~burrow.emitters.dynamic.DynamicEmitter` produces a
  :class:`~burrow.emitters.dynamic.RegistrationPlan` that imports modules
  at startup and registers only ``GET`` and ``POST``.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from burrow.types import CompiledRoute, RouteTable

logger = logging.getLogger("burrow.emit")


@dataclass(frozen=True, slots=True)
class StaticArtifact:
    """Generated module source plus the table it was generated from.

    ``content`` is a pure function of the table: no timestamps, no
    absolute paths, so regenerating an unchanged tree is byte-identical.
    """

    content: str
    routes: tuple[CompiledRoute, ...] = ()


class Emitter[T](Protocol):
    """Turns a ranked route table into a deliverable artifact."""

    def emit(self, table: RouteTable) -> T: ...


def log_registration(method: str, route: CompiledRoute, *, verbose: bool) -> None:
    """Per-route registration line; INFO when verbose, DEBUG otherwise."""
    level = logging.INFO if verbose else logging.DEBUG
    logger.log(level, "%-7s %s -> %s", method, route.url_pattern, route.source.relative_path)
