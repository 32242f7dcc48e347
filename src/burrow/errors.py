"""Burrow exception hierarchy.

Shared across the scanner, compiler, ranker, emitters, and watcher so
every module raises and catches the same types.
"""

from pathlib import Path


class BurrowError(Exception):
    """Base for all burrow-specific errors."""


class ConfigurationError(BurrowError):
    """Raised when compiler configuration is invalid.

    Missing routes directory, malformed exclude pattern, bad extension
    list.  Always raised before any file is scanned.
    """


class CompileError(BurrowError):
    """A route file cannot be compiled into a URL pattern.

    Fatal to the current compilation pass.  ``path`` is the relative
    path of the offending route file.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class CatchAllPositionError(CompileError):
    """A ``[...name]`` segment appears somewhere other than last."""


class DuplicateParameterError(CompileError):
    """The same parameter name is captured twice in one route file."""


class RouteConflictError(CompileError):
    """Two route files compile to the same URL pattern.

    Both source files and the shared pattern are named in the message.
    """

    def __init__(self, pattern: str, first: str, second: str) -> None:
        msg = (
            f"Route conflict on {pattern!r}: "
            f"{first!r} and {second!r} compile to the same pattern"
        )
        super().__init__(msg, path=second)
        self.pattern = pattern
        self.first = first
        self.second = second


class RouteLoadError(BurrowError):
    """A route module could not be parsed or imported."""

    def __init__(self, message: str, *, path: str | Path) -> None:
        super().__init__(message)
        self.path = str(path)


class EmitError(BurrowError):
    """The generated artifact could not be delivered.

    The previous artifact, if any, is left untouched.
    """
