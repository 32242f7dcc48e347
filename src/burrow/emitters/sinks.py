"""Delivery sinks — where generated source goes.

Compilation never knows which sink is active.  ``FileSink`` persists the
module on disk; ``CallbackSink`` hands the text to a callable (a dev
server's virtual module, a test).
"""

import contextlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from burrow._internal.types import ContentCallback
from burrow.errors import ConfigurationError, EmitError

logger = logging.getLogger("burrow.emit")


class Sink(Protocol):
    """Receives generated content. Returns True if anything changed."""

    def deliver(self, content: str) -> bool: ...


class FileSink:
    """Writes generated content to *path* atomically.

    Content goes to a temporary file in the same directory which then
    replaces the target, so a failed write never leaves a truncated
    module behind.  Unchanged content is not rewritten, which keeps file
    watchers and reloaders quiet.
    """

    __slots__ = ("path",)

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def deliver(self, content: str) -> bool:
        # An unreadable target is simply rewritten
        with contextlib.suppress(OSError):
            if self.path.is_file() and self.path.read_text(encoding="utf-8") == content:
                logger.debug("Unchanged: %s", self.path)
                return False

        directory = self.path.parent
        tmp_name: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
                fh.write(content)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            msg = f"Cannot write generated routes to {self.path}: {exc}"
            raise EmitError(msg) from exc

        logger.info("Wrote %s", self.path)
        return True


class CallbackSink:
    """Passes generated content to *callback* instead of writing it."""

    __slots__ = ("_last", "callback")

    def __init__(self, callback: ContentCallback) -> None:
        self.callback = callback
        self._last: str | None = None

    def deliver(self, content: str) -> bool:
        changed = content != self._last
        self._last = content
        self.callback(content)
        return changed


def sink_for(output: str | Path, *, write: bool, callback: ContentCallback | None) -> Sink:
    """Pick the sink for a ``write`` / ``callback`` configuration."""
    if write:
        return FileSink(output)
    if callback is None:
        raise ConfigurationError("write=False requires a callback to receive the generated routes.")
    return CallbackSink(callback)
