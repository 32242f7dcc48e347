"""Tests for the static backend — generated route modules."""

from pathlib import Path

import pytest

from burrow.config import CompilerConfig
from burrow.emitters.static import ParsedRegistration, StaticEmitter, parse_registrations
from burrow.errors import BurrowError
from burrow.pipeline import compile_table, generate
from burrow.registrar import RouteCollector
from burrow.runtime import load_route_module

TREE = {
    "index.py": "def GET(request):\n    return 'home'\n",
    "about.py": "def GET(request):\n    return 'about'\n",
    "users/index.py": "def GET(request):\n    return 'users'\n\ndef POST(request):\n    return 'created'\n",
    "users/[id].py": (
        "def GET(request):\n    return 'user'\n\n"
        "def DELETE(request):\n    return 'deleted'\n"
    ),
    "users/[...path].py": "def GET(request, path):\n    return path\n",
}


@pytest.fixture
def config(route_tree, tmp_path: Path) -> CompilerConfig:
    root = route_tree(TREE)
    return CompilerConfig(routes_dir=root, output=tmp_path / "routes_generated.py")


class TestContent:
    def test_routes_dir_relative_to_output(self, config: CompilerConfig) -> None:
        content = generate(config).content
        assert "ROUTES_DIR = Path(__file__).resolve().parent / 'routes'" in content
        assert str(Path(config.routes_dir).resolve()) not in content

    def test_routes_dir_from_nested_output(self, route_tree, tmp_path: Path) -> None:
        root = route_tree(TREE)
        config = CompilerConfig(routes_dir=root, output=tmp_path / "app" / "gen.py")
        assert "parent / '../routes'" in generate(config).content

    def test_load_statements(self, config: CompilerConfig) -> None:
        content = generate(config).content
        assert "_route_0 = load_route_module(ROUTES_DIR / 'about.py', 'burrow_routes.about')" in content
        assert "load_route_module(ROUTES_DIR / 'users/[id].py', 'burrow_routes.users.[id]')" in content

    def test_every_method_registered(self, config: CompilerConfig) -> None:
        content = generate(config).content
        assert "router.add_route('GET', '/users/:id', " in content
        assert "router.add_route('DELETE', '/users/:id', " in content
        assert "router.add_route('POST', '/users', _route_1.POST)" in content

    def test_annotations(self, config: CompilerConfig) -> None:
        content = generate(config).content
        assert "from burrow.registrar import Registrar" in content
        assert "def register_routes(router: Registrar) -> None:" in content

    def test_without_annotations(self, route_tree, tmp_path: Path) -> None:
        root = route_tree(TREE)
        config = CompilerConfig(routes_dir=root, output=tmp_path / "gen.py", annotations=False)
        content = generate(config).content
        assert "Registrar" not in content
        assert "def register_routes(router):" in content

    def test_no_middleware_import_when_unused(self, route_tree, tmp_path: Path) -> None:
        root = route_tree({"index.py": "def GET(r): ...\n", "users/[id].py": "def GET(r): ...\n"})
        config = CompilerConfig(routes_dir=root, output=tmp_path / "gen.py")
        assert "with_middleware" not in generate(config).content

    def test_catch_all_wrapping(self, config: CompilerConfig) -> None:
        content = generate(config).content
        assert "from burrow.runtime import load_route_module, with_middleware" in content
        assert "router.add_route('GET', '/users/*', with_middleware(_route_4, 'GET', '/users/*', 'path'))" in content

    def test_middleware_wrapping(self, route_tree, tmp_path: Path) -> None:
        root = route_tree(
            {
                "admin.py": (
                    "def guard(request, call_next):\n    return call_next(request)\n\n"
                    "def GET(request):\n    return 'admin'\n\n"
                    "middleware = {'GET': [guard]}\n"
                ),
            }
        )
        config = CompilerConfig(routes_dir=root, output=tmp_path / "gen.py")
        content = generate(config).content
        assert "from burrow.runtime import load_route_module, with_middleware" in content
        assert "router.add_route('GET', '/admin', with_middleware(_route_0, 'GET'))" in content

    def test_trailing_newline_and_no_trailing_spaces(self, config: CompilerConfig) -> None:
        content = generate(config).content
        assert content.endswith("\n")
        assert not content.endswith("\n\n")
        assert all(line == line.rstrip() for line in content.splitlines())

    def test_valid_python(self, config: CompilerConfig) -> None:
        compile(generate(config).content, "routes_generated.py", "exec")

    def test_empty_table(self, route_tree, tmp_path: Path) -> None:
        root = route_tree({"helpers.py": "def util():\n    pass\n"})
        config = CompilerConfig(routes_dir=root, output=tmp_path / "gen.py")
        content = generate(config).content
        compile(content, "gen.py", "exec")
        assert parse_registrations(content) == []


class TestDeterminism:
    def test_rebuild_is_byte_identical(self, config: CompilerConfig) -> None:
        assert generate(config).content == generate(config).content

    def test_independent_of_creation_order(self, tmp_path: Path) -> None:
        contents = []
        for name, order in (("one", list(TREE)), ("two", list(reversed(TREE)))):
            root = tmp_path / name / "routes"
            for relative in order:
                path = root / relative
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(TREE[relative], encoding="utf-8")
            config = CompilerConfig(routes_dir=root, output=tmp_path / name / "gen.py")
            contents.append(generate(config).content)
        assert contents[0] == contents[1]


class TestParseRegistrations:
    def test_recovers_calls_in_order(self, config: CompilerConfig) -> None:
        parsed = parse_registrations(generate(config).content)
        assert parsed[0] == ParsedRegistration("GET", "/about", "about.py")
        assert [(p.method, p.pattern) for p in parsed] == [
            ("GET", "/about"),
            ("GET", "/users"),
            ("POST", "/users"),
            ("GET", "/"),
            ("GET", "/users/:id"),
            ("DELETE", "/users/:id"),
            ("GET", "/users/*"),
        ]

    def test_rejects_invalid_source(self) -> None:
        with pytest.raises(BurrowError):
            parse_registrations("def (")

    def test_rejects_foreign_module(self) -> None:
        with pytest.raises(BurrowError):
            parse_registrations("x = 1\n")

    @pytest.mark.parametrize(
        "call",
        [
            "router.add_route('GET', '/x', handler=_route_0.GET)",
            "router.add_route('GET', '/x')",
            "router.add_route(METHOD, '/x', _route_0.GET)",
            "router.add_route('GET', PATTERN, _route_0.GET)",
            "router.add_route('GET', '/x', _route_0.GET, 'extra')",
        ],
    )
    def test_rejects_hand_edited_calls(self, call: str) -> None:
        content = f"def register_routes(router):\n    {call}\n"
        with pytest.raises(BurrowError) as exc_info:
            parse_registrations(content)
        assert "Line 2" in str(exc_info.value)


class TestGeneratedModule:
    def test_registers_on_router(self, config: CompilerConfig) -> None:
        output = Path(config.output)
        output.write_text(generate(config).content, encoding="utf-8")
        module = load_route_module(output, "burrow_test_generated")

        router = RouteCollector()
        module.register_routes(router)

        assert router.patterns == ["/about", "/users", "/", "/users/:id", "/users/*"]
        assert router.methods_for("/users/:id") == ["GET", "DELETE"]
        match = router.match("GET", "/users/42")
        assert match.registration.handler(None) == "user"
        assert match.params == {"id": "42"}

    @pytest.mark.anyio
    async def test_catch_all_receives_segments(self, config: CompilerConfig) -> None:
        output = Path(config.output)
        output.write_text(generate(config).content, encoding="utf-8")
        module = load_route_module(output, "burrow_test_generated_catch_all")

        router = RouteCollector()
        module.register_routes(router)

        assert await router.dispatch("GET", "/users/42/posts/7", "/users/42/posts/7") == ["42", "posts", "7"]

    def test_emitter_uses_table_root(self, config: CompilerConfig, tmp_path: Path) -> None:
        table = compile_table(config)
        artifact = StaticEmitter(tmp_path / "gen.py").emit(table)
        assert len(artifact.routes) == 5
        assert "parent / 'routes'" in artifact.content
