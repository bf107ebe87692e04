"""
Filesystem helpers for the raw coverage directory.

The instrumented runtime writes covmeta.* and covcounters.* files into
GOCOVERDIR. These helpers count, list and remove them without interpreting
their contents.
"""

import logging
import shutil
from pathlib import Path

from coverage_collector.constants import COVCOUNTERS_PREFIX

logger = logging.getLogger(__name__)


def list_files(directory: Path) -> list[Path]:
    """All regular files below a directory, sorted."""
    return sorted(path for path in directory.rglob("*") if path.is_file())


def list_entries(directory: Path) -> list[Path]:
    """Every file and directory below a directory, sorted."""
    return sorted(directory.rglob("*"))


def clear_directory(directory: Path) -> int:
    """
    Delete everything inside a directory, keeping the directory itself.

    Returns:
        Number of top-level entries removed
    """
    removed = 0
    for entry in directory.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()
        removed += 1
    return removed


def find_covcounters(directory: Path) -> list[Path]:
    """Counter files left behind by terminated processes."""
    return sorted(
        path
        for path in directory.rglob(f"{COVCOUNTERS_PREFIX}*")
        if path.is_file()
    )


def describe_directory(directory: Path) -> list[str]:
    """One line per entry with size, for diagnostics."""
    lines = []
    for entry in sorted(directory.iterdir()):
        if entry.is_dir() and not entry.is_symlink():
            lines.append(f"{entry.name}/")
        else:
            lines.append(f"{entry.name} ({entry.lstat().st_size} bytes)")
    return lines
