"""Filesystem scan of the routes directory.

Walks the routes tree and returns every candidate source file with its
path relative to the root.  Order is stable (sorted by relative path)
but carries no routing meaning; precedence is decided later by
:mod:`burrow.ranking`.

Skipped without complaint:

- ``__pycache__`` directories and dot-prefixed entries
- ``__init__.py`` package markers
- anything matched by an exclude glob

Symlinked directories are followed, but a directory whose resolved path
is already on the current branch (a cycle) is skipped with a warning,
as is any directory that cannot be listed.
"""

import fnmatch
import logging
from pathlib import Path, PurePosixPath

from burrow.config import validate_exclude
from burrow.errors import ConfigurationError
from burrow.types import SourceFile

logger = logging.getLogger("burrow.scan")

_SKIP_DIRS = frozenset({"__pycache__"})
_SKIP_FILES = frozenset({"__init__.py"})


def scan_directory(
    root: str | Path,
    *,
    externals: tuple[str, ...] = (),
    extensions: tuple[str, ...] = (".py",),
) -> list[SourceFile]:
    """Walk *root* and collect candidate route files.

    Args:
        root: The routes directory.
        externals: Exclude globs matched against relative POSIX paths.
        extensions: Accepted file suffixes.

    Returns:
        Source files sorted by relative path.

    Raises:
        ConfigurationError: If *root* is not a directory or an exclude
            pattern is invalid.  Raised before anything is read.
    """
    for pattern in externals:
        validate_exclude(pattern)

    root_path = Path(root)
    if not root_path.is_dir():
        msg = f"Routes directory not found: {root_path.resolve()}"
        raise ConfigurationError(msg)
    root_path = root_path.resolve()

    found: list[SourceFile] = []
    _walk(
        root_path,
        root_path,
        ancestors=frozenset({root_path}),
        externals=externals,
        extensions=frozenset(extensions),
        found=found,
    )
    found.sort(key=lambda f: f.relative_path)
    logger.debug("Scanned %s: %d candidate files", root_path, len(found))
    return found


def _walk(
    directory: Path,
    root: Path,
    *,
    ancestors: frozenset[Path],
    externals: tuple[str, ...],
    extensions: frozenset[str],
    found: list[SourceFile],
) -> None:
    """Recursively collect files below *directory*.

    *ancestors* holds the resolved directories on the current branch so
    symlink loops are detected without forbidding two links to the same
    target in sibling branches.
    """
    try:
        entries = sorted(directory.iterdir())
    except OSError as exc:
        logger.warning("Skipping unreadable directory %s: %s", directory, exc)
        return

    for item in entries:
        if item.name.startswith("."):
            continue

        # Relative to the logical (unresolved) walk so symlinked
        # directories keep their own names in the URL
        relative = _relative(item, directory, root)

        if _is_excluded(relative, externals):
            continue

        try:
            is_dir = item.is_dir()
            is_file = not is_dir and item.is_file()
        except OSError as exc:
            logger.warning("Skipping unreadable entry %s: %s", item, exc)
            continue

        if is_dir:
            if item.name in _SKIP_DIRS:
                continue
            resolved = item.resolve()
            if resolved in ancestors:
                logger.warning("Skipping symlink cycle at %s -> %s", item, resolved)
                continue
            _walk(
                item,
                root,
                ancestors=ancestors | {resolved},
                externals=externals,
                extensions=extensions,
                found=found,
            )
        elif is_file:
            if item.name in _SKIP_FILES or item.suffix not in extensions:
                continue
            found.append(SourceFile(absolute_path=item.resolve(), relative_path=relative))


def _relative(item: Path, directory: Path, root: Path) -> str:
    """POSIX relative path of *item*, built from the walked components."""
    parent = PurePosixPath(*directory.relative_to(root).parts) if directory != root else PurePosixPath()
    return str(parent / item.name)


def _is_excluded(relative: str, externals: tuple[str, ...]) -> bool:
    """True if *relative* (or a directory prefix of it) matches an exclude glob."""
    for pattern in externals:
        if fnmatch.fnmatchcase(relative, pattern):
            return True
        # ``helpers/**`` also excludes the ``helpers`` directory itself
        if pattern.endswith("/**") and fnmatch.fnmatchcase(relative, pattern[:-3]):
            return True
    return False
