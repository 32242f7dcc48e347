"""Compiler configuration.

CompilerConfig is a frozen dataclass — immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from burrow.errors import ConfigurationError

type Strategy = Literal["static", "dynamic"]

_STRATEGIES = ("static", "dynamic")


@dataclass(frozen=True, slots=True)
class CompilerConfig:
    """Route compiler configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = CompilerConfig(routes_dir="app/routes", verbose=True)
    """

    # Scan
    routes_dir: str | Path = "routes"
    externals: tuple[str, ...] = ()  # Exclude globs, matched against relative paths
    extensions: tuple[str, ...] = (".py",)

    # Method extraction: "static" inspects source, "dynamic" imports the module
    strategy: Strategy = "static"

    # Output
    output: str | Path = "routes_generated.py"
    write: bool = True  # False hands the content to ``callback`` instead
    callback: Callable[[str], object] | None = None
    annotations: bool = True  # Type hints in the generated module (cosmetic)

    # Logging
    verbose: bool = False

    def validate(self) -> None:
        """Raise ``ConfigurationError`` if any setting is unusable."""
        if not self.extensions:
            raise ConfigurationError("At least one source extension is required.")
        for ext in self.extensions:
            if not ext.startswith(".") or len(ext) < 2:
                msg = f"Invalid source extension {ext!r}: expected a suffix like '.py'"
                raise ConfigurationError(msg)
        if self.strategy not in _STRATEGIES:
            msg = f"Unknown extraction strategy {self.strategy!r}. Expected one of: {', '.join(_STRATEGIES)}"
            raise ConfigurationError(msg)
        for pattern in self.externals:
            validate_exclude(pattern)


@dataclass(frozen=True, slots=True)
class DevConfig:
    """Watch-mode settings layered on top of a :class:`CompilerConfig`.

    ``virtual_route`` keeps the generated module in memory and serves it
    through ``callback`` / :class:`burrow.watch.VirtualModule` instead of
    rewriting ``output`` on disk.
    """

    compiler: CompilerConfig = field(default_factory=CompilerConfig)
    virtual_route: bool = True
    virtual_module_name: str = "generated_routes"
    debounce_ms: int = 50


def validate_exclude(pattern: str) -> None:
    """Reject exclude globs that can never match a relative path."""
    if not pattern.strip():
        raise ConfigurationError("Exclude patterns must not be empty.")
    if pattern.startswith("/") or Path(pattern).is_absolute():
        msg = f"Exclude pattern {pattern!r} must be relative to the routes directory"
        raise ConfigurationError(msg)
