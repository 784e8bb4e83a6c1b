"""
Command file discovery.

Command sources follow the layout::

    <base>/commands/<root>/command.py
    <base>/commands/<root>/<sub>/command.py
    <base>/commands/<root>/<sub>/<subsub>/command.py
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

COMMAND_FILE_NAME = "command.py"
COMPILED_FILE_NAME = "command.pyc"
# Directory nesting below the commands root: <root>/<sub>/<subsub>
MAX_DEPTH = 3


def scan_command_files(root_dir: Path, depth: int = 0) -> list[Path]:
    """
    Find every command definition file under root_dir.

    Recurses into subdirectories at most MAX_DEPTH levels below root_dir and
    keeps only files named exactly COMMAND_FILE_NAME, so a file in
    ``<root>/<sub>/<subsub>/`` is found and anything deeper is not. Ordering follows
    directory enumeration and is not guaranteed to be sorted.

    Args:
        root_dir: Directory to search
        depth: Current recursion depth

    Returns:
        Absolute paths of command files; empty if root_dir does not exist.
    """
    if depth > MAX_DEPTH:
        return []

    try:
        entries = list(os.scandir(root_dir))
    except FileNotFoundError:
        return []
    except NotADirectoryError:
        logger.warning(f"Commands path is not a directory: {root_dir}")
        return []

    found: list[Path] = []
    for entry in entries:
        full_path = Path(root_dir, entry.name).resolve()
        if entry.is_dir():
            found.extend(scan_command_files(full_path, depth + 1))
        elif entry.is_file() and entry.name == COMMAND_FILE_NAME:
            found.append(full_path)
    return found


def entry_key(file_path: Path, base_dir: Path) -> str:
    """Logical build entry name for a command file.

    The path relative to base_dir with forward slashes and without the
    source extension, e.g. ``commands/ping/command``.
    """
    relative = Path(file_path).resolve().relative_to(Path(base_dir).resolve())
    return relative.with_suffix("").as_posix()


def artifact_path(dist_dir: Path, key: str) -> Path:
    """Compiled artifact location for an entry key."""
    return Path(dist_dir).resolve().joinpath(*key.split("/")).with_suffix(".pyc")
