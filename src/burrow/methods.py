"""HTTP method tokens recognised in route modules.

A route module exports handlers as module-level bindings named after
one of seven method tokens.  Two subsets matter downstream:

- ``INCLUSION_METHODS`` decides whether a file is a route at all.
  Helper modules (shared types, utilities) can live in the routes tree
  as long as they export neither ``GET`` nor ``POST``.
- ``RUNTIME_METHODS`` is what the dynamic registrar wires up.  The
  static backend registers every exported method; the dynamic backend
  only ever registers these two.
"""

from enum import StrEnum


class Method(StrEnum):
    """Closed set of HTTP methods a route module may export.

    Declaration order is the canonical registration order.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


ALL_METHODS: tuple[Method, ...] = tuple(Method)

INCLUSION_METHODS: frozenset[Method] = frozenset({Method.GET, Method.POST})

RUNTIME_METHODS: tuple[Method, ...] = (Method.GET, Method.POST)

# Module-level binding holding per-method middleware
MIDDLEWARE_EXPORT = "middleware"


def ordered(methods: frozenset[Method]) -> tuple[Method, ...]:
    """Return *methods* in canonical declaration order."""
    return tuple(m for m in ALL_METHODS if m in methods)


def is_eligible(methods: frozenset[Method]) -> bool:
    """True if a file exporting *methods* belongs in the route table."""
    return not INCLUSION_METHODS.isdisjoint(methods)
