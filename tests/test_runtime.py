"""Tests for burrow.runtime — module loading, handlers, middleware."""

import sys
from types import ModuleType

import pytest

from burrow.errors import RouteLoadError
from burrow.methods import Method
from burrow.runtime import (
    apply_middleware,
    load_route_module,
    module_name_for,
    pass_segments,
    request_path,
    route_handlers,
    with_middleware,
)


def _module(**attrs: object) -> ModuleType:
    module = ModuleType("fake_route")
    for name, value in attrs.items():
        setattr(module, name, value)
    return module


class TestModuleName:
    def test_nested(self) -> None:
        assert module_name_for("users/[id].py") == "burrow_routes.users.[id]"

    def test_root_index(self) -> None:
        assert module_name_for("index.py") == "burrow_routes.index"


class TestLoadRouteModule:
    def test_loads_bracket_file(self, route_tree) -> None:
        root = route_tree({"users/[id].py": "def GET(r):\n    return 'user'\n"})
        module = load_route_module(root / "users" / "[id].py", "burrow_routes.test.users.[id]")
        assert module.GET(None) == "user"
        assert sys.modules["burrow_routes.test.users.[id]"] is module

    def test_reload_reexecutes(self, route_tree) -> None:
        root = route_tree({"a.py": "X = 1\n"})
        load_route_module(root / "a.py", "burrow_routes.test.reload")
        (root / "a.py").write_text("X = 222\n")
        assert load_route_module(root / "a.py", "burrow_routes.test.reload").X == 222

    def test_failure_chained_and_unregistered(self, route_tree) -> None:
        root = route_tree({"bad.py": "raise ValueError('boom')\n"})
        with pytest.raises(RouteLoadError) as exc_info:
            load_route_module(root / "bad.py", "burrow_routes.test.bad")
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert "boom" in str(exc_info.value)
        assert "burrow_routes.test.bad" not in sys.modules

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(RouteLoadError):
            load_route_module(tmp_path / "missing.py", "burrow_routes.test.missing")


class TestRouteHandlers:
    def test_collects_callables(self) -> None:
        def get(r):
            return r

        handlers = route_handlers(_module(GET=get, POST="nope"))
        assert dict(handlers.handlers) == {Method.GET: get}
        assert dict(handlers.middleware) == {}

    def test_middleware_normalized(self) -> None:
        def mw(r, n):
            return n(r)

        module = _module(GET=lambda r: r, middleware={"get": mw, Method.POST: [mw, mw]})
        handlers = route_handlers(module)
        assert handlers.middleware[Method.GET] == (mw,)
        assert handlers.middleware[Method.POST] == (mw, mw)

    def test_middleware_must_be_mapping(self) -> None:
        with pytest.raises(RouteLoadError):
            route_handlers(_module(GET=lambda r: r, middleware=[lambda r, n: n(r)]))

    def test_unknown_method_in_middleware(self) -> None:
        with pytest.raises(RouteLoadError) as exc_info:
            route_handlers(_module(GET=lambda r: r, middleware={"FETCH": lambda r, n: n(r)}))
        assert "FETCH" in str(exc_info.value)

    def test_non_callable_middleware(self) -> None:
        with pytest.raises(RouteLoadError):
            route_handlers(_module(GET=lambda r: r, middleware={"GET": [42]}))

    def test_wrapped_without_middleware_is_handler(self) -> None:
        def get(r):
            return r

        assert route_handlers(_module(GET=get)).wrapped(Method.GET) is get


class TestMiddleware:
    @pytest.mark.anyio
    async def test_order_outermost_first(self) -> None:
        calls: list[str] = []

        async def outer(request, call_next):
            calls.append("outer")
            return await call_next(request + "o")

        def inner(request, call_next):
            calls.append("inner")
            return call_next(request + "i")

        async def handler(request):
            calls.append("handler")
            return request

        wrapped = apply_middleware(handler, (outer, inner))
        assert await wrapped("r") == "roi"
        assert calls == ["outer", "inner", "handler"]

    @pytest.mark.anyio
    async def test_short_circuit(self) -> None:
        async def deny(request, call_next):
            return "denied"

        def handler(request):
            raise AssertionError("handler must not run")

        assert await apply_middleware(handler, (deny,))("r") == "denied"

    @pytest.mark.anyio
    async def test_extra_args_forwarded(self) -> None:
        async def passthrough(request, call_next):
            return await call_next(request)

        def handler(request, rest):
            return (request, rest)

        wrapped = apply_middleware(handler, (passthrough,))
        assert await wrapped("r", ["a", "b"]) == ("r", ["a", "b"])

    @pytest.mark.anyio
    async def test_with_middleware_reads_module(self) -> None:
        async def tag(request, call_next):
            return "tagged:" + await call_next(request)

        def delete(request):
            return "deleted"

        module = _module(DELETE=delete, middleware={"DELETE": [tag]})
        wrapped = with_middleware(module, "DELETE")
        assert wrapped.__name__ == "delete"
        assert await wrapped("r") == "tagged:deleted"


class TestCatchAll:
    @pytest.mark.anyio
    async def test_segments_from_request_path(self) -> None:
        class Request:
            path = "/docs/guide/install"

        def handler(request, rest):
            return rest

        assert await pass_segments(handler, "/docs/*", "rest")(Request()) == ["guide", "install"]

    @pytest.mark.anyio
    async def test_root_catch_all(self) -> None:
        wrapped = pass_segments(lambda request, rest: rest, "/*", "rest")
        assert await wrapped("/a/b") == ["a", "b"]

    @pytest.mark.anyio
    async def test_explicit_value_kept(self) -> None:
        wrapped = pass_segments(lambda request, rest: rest, "/*", "rest")
        assert await wrapped("/a/b", rest=["given"]) == ["given"]

    def test_request_without_path(self) -> None:
        with pytest.raises(TypeError):
            request_path(object())

    @pytest.mark.anyio
    async def test_with_middleware_adds_segments(self) -> None:
        def get(request, slug):
            return slug

        wrapped = with_middleware(_module(GET=get), "GET", "/articles/*", "slug")
        assert await wrapped("/articles/x/y") == ["x", "y"]
