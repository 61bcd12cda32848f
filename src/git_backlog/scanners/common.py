"""Shared utilities for pattern scanners."""

import logging
import os
from pathlib import Path
from typing import Generator, Iterable

logger = logging.getLogger(__name__)


# Dependency cache directory, skipped in addition to hidden directories
DEPENDENCY_DIR = "node_modules"


def is_skipped_dir(name: str) -> bool:
    """Hidden directories (.git, .venv, ...) and node_modules are never scanned."""
    return name.startswith(".") or name == DEPENDENCY_DIR


def _log_walk_error(error: OSError) -> None:
    logger.error(f"Error reading directory {error.filename}: {error.strerror}")


def walk_source_files(
    root: str | Path,
    extensions: Iterable[str],
) -> Generator[Path, None, None]:
    """Yield files under ``root`` whose suffix is in ``extensions``.

    The walk is depth-first with directories and files visited in sorted
    order. Unreadable directories are logged and skipped.

    Args:
        root: Directory to walk.
        extensions: Allowed suffixes including the dot, e.g. ``.js``.
    """
    allowed = set(extensions)

    for current, dirs, files in os.walk(root, onerror=_log_walk_error):
        dirs[:] = sorted(d for d in dirs if not is_skipped_dir(d))
        for name in sorted(files):
            path = Path(current) / name
            if path.suffix in allowed:
                yield path
