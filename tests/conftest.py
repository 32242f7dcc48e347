"""Shared fixtures for burrow tests.

``route_tree`` writes a routes directory from a ``{relative_path: source}``
mapping so each test states its tree inline.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

type TreeFactory = Callable[[dict[str, str]], Path]


@pytest.fixture
def route_tree(tmp_path: Path) -> TreeFactory:
    """Build ``tmp_path/routes`` from a mapping and return its path."""

    def make(files: dict[str, str]) -> Path:
        root = tmp_path / "routes"
        root.mkdir(exist_ok=True)
        for relative, source in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source, encoding="utf-8")
        return root

    return make


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
