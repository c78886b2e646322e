"""Recursive content scanner."""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

from godojo_content.errors import DirectoryNotFound

logger = logging.getLogger(__name__)

# Suffixes the pipeline knows how to handle
CONTENT_SUFFIXES: tuple[str, ...] = (".md", ".go", ".json")

PathFilter = Callable[[Path], bool]


def suffix_filter(*suffixes: str) -> PathFilter:
    """Build a predicate accepting files with any of ``suffixes`` (case-insensitive)."""
    wanted = tuple(s.lower() for s in suffixes)
    return lambda path: path.suffix.lower() in wanted


def scan_files(root: str | Path, accept: PathFilter | None = None) -> Iterator[Path]:
    """Yield files under ``root`` depth-first, in sorted name order.

    Hidden entries (names starting with ``.``) are skipped. The order only
    depends on the file names, so repeated scans of an unchanged tree yield the
    same sequence.

    Args:
        root: Directory to walk.
        accept: Predicate on file paths; defaults to ``CONTENT_SUFFIXES``.

    Returns:
        A lazy iterator over matching file paths.

    Raises:
        DirectoryNotFound: If ``root`` is not a directory.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise DirectoryNotFound(f"Directory not found: {root_path}")
    return _walk(root_path, accept or suffix_filter(*CONTENT_SUFFIXES))


def _walk(directory: Path, accept: PathFilter) -> Iterator[Path]:
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            yield from _walk(entry, accept)
        elif entry.is_file() and accept(entry):
            logger.debug("Found %s", entry)
            yield entry


def list_dirs(directory: str | Path) -> list[Path]:
    """Immediate, non-hidden subdirectories of ``directory`` sorted by name."""
    path = Path(directory)
    if not path.is_dir():
        return []
    return sorted(
        (p for p in path.iterdir() if p.is_dir() and not p.name.startswith(".")),
        key=lambda p: p.name,
    )
