"""Dynamic backend — import and register route modules at startup.

Nothing is written to disk.  The emitter turns the ranked table into a
:class:`RegistrationPlan`; awaiting :meth:`RegistrationPlan.register`
imports each module in rank order and registers its handlers::

    plan = DynamicEmitter().emit(table)
    await plan.register(router)

Method coverage is deliberately narrower than the static backend: only
``GET`` and ``POST`` are registered, even if the module exports more.
Declared middleware still wraps the handlers that are registered, and
catch-all handlers receive the remaining path segments.

Imports run one at a time in a worker thread.  They are awaited
sequentially, never concurrently, so registration order matches rank
order regardless of how long each import takes.  A module that fails to
import aborts registration with :class:`~burrow.errors.RouteLoadError`;
skipping it would silently change which handler answers a URL.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from anyio import to_thread

from burrow.emitters.base import log_registration
from burrow.methods import RUNTIME_METHODS
from burrow.registrar import Registrar
from burrow.runtime import load_route_module, module_name_for, route_handlers
from burrow.types import CompiledRoute, RouteTable

logger = logging.getLogger("burrow.emit")


@dataclass(frozen=True, slots=True)
class PlannedRoute:
    """A ranked route and where to import its module from."""

    route: CompiledRoute
    path: Path
    module_name: str

    @property
    def pattern(self) -> str:
        return self.route.url_pattern


@dataclass(frozen=True, slots=True)
class RegistrationPlan:
    """Ordered routes to import and register at process start."""

    entries: tuple[PlannedRoute, ...] = ()
    verbose: bool = False

    async def register(self, router: Registrar) -> None:
        """Import every module in rank order and register GET/POST handlers.

        Raises:
            RouteLoadError: A module failed to import.  Routes before it
                have been registered; none after it.
        """
        for entry in self.entries:
            module = await to_thread.run_sync(load_route_module, entry.path, entry.module_name)
            handlers = route_handlers(module)
            for method in RUNTIME_METHODS:
                if method not in handlers.handlers:
                    continue
                handler = handlers.wrapped(
                    method,
                    pattern=entry.pattern,
                    catch_all=entry.route.catch_all_param,
                )
                router.add_route(method.value, entry.pattern, handler)
                log_registration(method.value, entry.route, verbose=self.verbose)
        logger.debug("Registered %d routes at runtime", len(self.entries))


class DynamicEmitter:
    """Builds a :class:`RegistrationPlan` from a route table."""

    __slots__ = ("verbose",)

    def __init__(self, *, verbose: bool = False) -> None:
        self.verbose = verbose

    def emit(self, table: RouteTable) -> RegistrationPlan:
        entries = tuple(
            PlannedRoute(
                route=route,
                path=route.source.absolute_path,
                module_name=module_name_for(route.source.relative_path),
            )
            for route in table
        )
        return RegistrationPlan(entries=entries, verbose=self.verbose)
