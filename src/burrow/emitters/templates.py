"""Kida templates for generated source.

Block tags sit at column zero so the output is valid Python whatever
whitespace control the environment applies.
"""

ROUTES_MODULE = '''\
"""Route registrations generated by burrow. Do not edit.

Routes are registered in match order: the first matching pattern wins.
"""

from pathlib import Path

{% if annotations %}
from burrow.registrar import Registrar
{% end %}
from burrow.runtime import load_route_module{% if wraps_handlers %}, with_middleware{% end %}


ROUTES_DIR = Path(__file__).resolve().parent / {{ routes_dir }}

{% for route in routes %}
{{ route.alias }} = load_route_module(ROUTES_DIR / {{ route.locator }}, {{ route.module_name }})
{% end %}


{% if annotations %}
def register_routes(router: Registrar) -> None:
{% else %}
def register_routes(router):
{% end %}
    """Register every route on *router*, most specific first."""
{% for route in routes %}
{% for call in route.calls %}
    router.add_route({{ call.method }}, {{ call.pattern }}, {{ call.handler }})
{% end %}
{% end %}
'''

TEMPLATES: dict[str, str] = {
    "routes.py": ROUTES_MODULE,
}
