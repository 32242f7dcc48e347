"""Shared type aliases used across burrow modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler — user-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]

# Middleware — receives (request, next) and returns whatever next returns
Middleware: TypeAlias = Callable[..., Any]

# Receives generated module source when it is not written to disk
ContentCallback: TypeAlias = Callable[[str], object]
