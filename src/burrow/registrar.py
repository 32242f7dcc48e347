"""Router contract and a reference in-memory router.

Generated modules and the dynamic registrar only ever call one method
on the router they are given::

    router.add_route("GET", "/users/:id", handler)

Anything with that method satisfies :class:`Registrar`; adapting a host
framework means writing that one method.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from burrow._internal.invoke import invoke
from burrow._internal.types import Handler


class Registrar(Protocol):
    """Anything that accepts route registrations in order."""

    def add_route(self, method: str, pattern: str, handler: Handler) -> None: ...


@dataclass(frozen=True, slots=True)
class Registration:
    """One ``add_route`` call, as recorded by :class:`RouteCollector`."""

    method: str
    pattern: str
    handler: Handler


@dataclass(frozen=True, slots=True)
class Match:
    """Result of :meth:`RouteCollector.match`.

    ``params`` maps ``:name`` segments to their values; a trailing ``*``
    is captured under ``"*"`` with the remaining path joined by ``/``.
    """

    registration: Registration
    params: dict[str, str]


class RouteCollector:
    """Records registrations and matches paths first-match-wins.

    Usage::

        collector = RouteCollector()
        register_routes(collector)
        match = collector.match("GET", "/users/42")
        assert match.params == {"id": "42"}
    """

    __slots__ = ("registrations",)

    def __init__(self) -> None:
        self.registrations: list[Registration] = []

    def add_route(self, method: str, pattern: str, handler: Handler) -> None:
        self.registrations.append(Registration(method, pattern, handler))

    @property
    def patterns(self) -> list[str]:
        """Registered patterns in order, each listed once."""
        return list(dict.fromkeys(r.pattern for r in self.registrations))

    def methods_for(self, pattern: str) -> list[str]:
        return [r.method for r in self.registrations if r.pattern == pattern]

    def match(self, method: str, path: str) -> Match | None:
        """First registration for *method* whose pattern matches *path*."""
        parts = [p for p in path.strip("/").split("/") if p]
        for registration in self.registrations:
            if registration.method != method:
                continue
            params = match_pattern(registration.pattern, parts)
            if params is not None:
                return Match(registration, params)
        return None

    async def dispatch(self, method: str, path: str, *args: Any, **kwargs: Any) -> Any:
        """Match and call the handler; ``LookupError`` if nothing matches.

        ``:name`` parameters are passed as keyword arguments.  The ``*``
        capture is not; catch-all handlers read the rest of the path from
        the request.
        """
        match = self.match(method, path)
        if match is None:
            msg = f"No route matches {method} {path!r}"
            raise LookupError(msg)
        params = {k: v for k, v in match.params.items() if k != "*"}
        handler: Callable[..., Any] = match.registration.handler
        return await invoke(handler, *args, **params, **kwargs)


def match_pattern(pattern: str, parts: list[str]) -> dict[str, str] | None:
    """Match path components against a compiled pattern.

    Returns captured parameters, or ``None`` if the pattern does not
    match.  A trailing ``*`` consumes one or more remaining components.
    """
    segments = [s for s in pattern.strip("/").split("/") if s]
    params: dict[str, str] = {}
    for i, seg in enumerate(segments):
        if seg == "*":
            if i >= len(parts):
                return None
            params["*"] = "/".join(parts[i:])
            return params
        if i >= len(parts):
            return None
        if seg.startswith(":"):
            params[seg[1:]] = parts[i]
        elif seg != parts[i]:
            return None
    if len(parts) != len(segments):
        return None
    return params
