"""Development watcher — regenerate routes when the tree changes.

State machine::

    IDLE -> SCANNING -> COMPILING -> EMITTING -> IDLE
                \\           \\           \\
                 +-----------+-----------+--> ERROR

``ERROR`` is left on the next successful pass.  A failed pass keeps the
previous table and artifact; the host process keeps running.

At most one pass runs at a time.  A change arriving mid-pass marks a
single pending rerun; any number of further changes before that rerun
starts collapse into it.  All bookkeeping happens on one event loop with
no await between checking and setting the running flag, so no lock is
needed.

Delivery is either a file on disk or, with ``virtual_route``, an
in-memory :class:`VirtualModule` the host's loader can execute.
"""

import importlib.abc
import importlib.util
import logging
import sys
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from types import CodeType, ModuleType

import anyio
from anyio import to_thread
from watchfiles import Change, awatch

from burrow._internal.invoke import invoke
from burrow.compiler import compile_routes
from burrow.config import DevConfig
from burrow.emitters.sinks import FileSink
from burrow.emitters.static import StaticEmitter
from burrow.errors import BurrowError, RouteLoadError
from burrow.extraction import extract_route_files
from burrow.ranking import build_route_table
from burrow.scanning import scan_directory
from burrow.types import RouteTable, SourceFile

logger = logging.getLogger("burrow.watch")

type ReloadHook = Callable[[], Awaitable[object] | object]


class WatchState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    COMPILING = "compiling"
    EMITTING = "emitting"
    ERROR = "error"


class VirtualModule:
    """Generated routes held in memory instead of on disk.

    ``path`` is the nominal location of the module; route files are
    resolved relative to it exactly as if it had been written there.
    """

    __slots__ = ("content", "name", "path", "version")

    def __init__(self, name: str, path: str | Path) -> None:
        self.name = name
        self.path = Path(path).resolve()
        self.content: str | None = None
        self.version = 0

    def update(self, content: str) -> bool:
        """Swap in new content. Returns True if it differs."""
        if content == self.content:
            return False
        self.content = content
        self.version += 1
        return True

    def load(self) -> ModuleType:
        """Import the current content as a fresh module.

        Raises:
            LookupError: Nothing has been generated yet.
            RouteLoadError: The generated module raised while executing.
        """
        if self.content is None:
            msg = f"Virtual module {self.name!r} has not been generated yet"
            raise LookupError(msg)
        loader = _ContentLoader(self.content, self.path)
        spec = importlib.util.spec_from_loader(self.name, loader, origin=str(self.path))
        spec.has_location = True  # sets __file__, which ROUTES_DIR is resolved from
        module = importlib.util.module_from_spec(spec)
        sys.modules[self.name] = module
        try:
            loader.exec_module(module)
        except Exception as exc:
            sys.modules.pop(self.name, None)
            msg = f"Failed to load virtual module {self.name!r}: {exc}"
            raise RouteLoadError(msg, path=self.path) from exc
        return module


class _ContentLoader(importlib.abc.InspectLoader):
    """Loader serving generated source held in memory."""

    def __init__(self, content: str, path: Path) -> None:
        self.content = content
        self.path = path

    def get_source(self, fullname: str) -> str:
        return self.content

    def get_code(self, fullname: str) -> CodeType:
        return self.source_to_code(self.content, str(self.path))


class RouteWatcher:
    """Re-runs the compile pipeline on file changes.

    Args:
        config: Dev settings wrapping the compiler configuration.
        on_reload: Called (sync or async) after a pass delivers changed
            content, e.g. to restart the host's dev server.
    """

    def __init__(self, config: DevConfig, *, on_reload: ReloadHook | None = None) -> None:
        self.config = config
        self.on_reload = on_reload
        self.state = WatchState.IDLE
        self.table: RouteTable | None = None
        self.error: BurrowError | None = None
        self.passes = 0
        compiler = config.compiler
        self.virtual = VirtualModule(config.virtual_module_name, compiler.output)
        self._emitter = StaticEmitter(
            compiler.output,
            annotations=compiler.annotations,
            verbose=compiler.verbose,
        )
        self._file_sink = FileSink(compiler.output)
        self._running = False
        self._pending = False

    @property
    def running(self) -> bool:
        return self._running

    async def trigger(self) -> None:
        """Request a pass.

        Returns immediately if a pass is already running; that pass
        will be followed by exactly one more.
        """
        self._pending = True
        if self._running:
            return
        self._running = True
        try:
            while self._pending:
                self._pending = False
                await self._run_pass()
        finally:
            self._running = False

    async def run(self, *, stop_event: anyio.Event | None = None) -> None:
        """Generate once, then regenerate on every relevant change.

        The initial pass is only scheduled here.  It starts once the
        watch stream is open, so a change made during that pass is seen.
        """
        compiler = self.config.compiler
        async with anyio.create_task_group() as tg:
            tg.start_soon(self.trigger)
            async for changes in awatch(
                compiler.routes_dir,
                watch_filter=self.accepts,
                debounce=self.config.debounce_ms,
                stop_event=stop_event,
            ):
                logger.debug("%d change(s) under %s", len(changes), compiler.routes_dir)
                tg.start_soon(self.trigger)

    def accepts(self, change: Change, path: str) -> bool:
        """watchfiles filter: route sources and directories, never our own output.

        Directory events (a renamed or removed folder) carry no suffix and
        may name a path that no longer exists; they are always accepted
        and the scanner decides what is a route.
        """
        candidate = Path(path)
        if "__pycache__" in candidate.parts or candidate.name.startswith("."):
            return False
        if candidate.resolve() == Path(self.config.compiler.output).resolve():
            return False
        if candidate.suffix in self.config.compiler.extensions:
            return True
        return change == Change.deleted or not candidate.suffix or candidate.is_dir()

    async def _run_pass(self) -> None:
        compiler = self.config.compiler
        self.passes += 1
        try:
            self.state = WatchState.SCANNING
            compiler.validate()
            sources = await to_thread.run_sync(self._scan)

            self.state = WatchState.COMPILING
            table = await to_thread.run_sync(self._compile, sources)

            self.state = WatchState.EMITTING
            content = self._emitter.emit(table).content
            changed = await to_thread.run_sync(self._deliver, content)
        except BurrowError as exc:
            self.state = WatchState.ERROR
            self.error = exc
            logger.error("Route compilation failed: %s", exc)
            return

        self.table = table
        self.error = None
        self.state = WatchState.IDLE
        logger.info("Routes ready: %d routes", len(table))
        if changed and self.on_reload is not None:
            await invoke(self.on_reload)

    def _scan(self) -> list[SourceFile]:
        compiler = self.config.compiler
        return scan_directory(
            compiler.routes_dir,
            externals=compiler.externals,
            extensions=compiler.extensions,
        )

    def _compile(self, sources: list[SourceFile]) -> RouteTable:
        compiler = self.config.compiler
        route_files = extract_route_files(sources, strategy=compiler.strategy)
        return build_route_table(
            compile_routes(route_files),
            root=Path(compiler.routes_dir).resolve(),
        )

    def _deliver(self, content: str) -> bool:
        if not self.config.virtual_route:
            return self._file_sink.deliver(content)
        changed = self.virtual.update(content)
        if self.config.compiler.callback is not None:
            self.config.compiler.callback(content)
        return changed
