"""
Command module loader - imports compiled command modules from the output tree.

Each command directory in the output tree holds one ``command.pyc``. The
module must define a module-level ``command`` holding a
SlashRootCommandBuilder (top-level directories) or SlashSubCommandBuilder
(nested directories).

Loaded modules are cached per artifact and reused until the artifact's
version tag (modification time and size) changes, so a rebuild is picked
up on the next load and an unchanged artifact is never re-executed.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import sys
from importlib.machinery import SourcelessFileLoader
from importlib.util import module_from_spec, spec_from_file_location
from pathlib import Path
from typing import Optional

from slashtree.build.scanner import COMPILED_FILE_NAME
from slashtree.core.builders import CommandBuilder, CommandKind
from slashtree.core.exceptions import ModuleValidationError

logger = logging.getLogger(__name__)

EXPORT_NAME = "command"

VersionTag = tuple[int, int]


def version_tag(path: Path) -> Optional[VersionTag]:
    """(mtime_ns, size) of a file, or None if it does not exist."""
    try:
        st = path.stat()
    except OSError:
        return None
    return (st.st_mtime_ns, st.st_size)


class CommandModuleLoader:
    """Loads and validates compiled command modules."""

    def __init__(self, prefix: str = "slashtree_cmd"):
        self.prefix = prefix
        self._cache: dict[Path, tuple[VersionTag, CommandBuilder]] = {}

    def _module_name(self, command_file: Path) -> str:
        digest = hashlib.sha1(str(command_file).encode()).hexdigest()[:10]
        return f"{self.prefix}_{command_file.parent.name}_{digest}"

    def _import(self, command_file: Path) -> object:
        module_name = self._module_name(command_file)
        loader = SourcelessFileLoader(module_name, str(command_file))
        spec = spec_from_file_location(module_name, command_file, loader=loader)
        if spec is None or spec.loader is None:
            raise ImportError(f"Could not create module spec for {command_file}")

        module = module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(module_name, None)
            raise
        return module

    def load_sync(self, directory: Path, expected: CommandKind) -> tuple[str, CommandBuilder]:
        """
        Load the command defined in directory.

        Args:
            directory: Command directory in the output tree
            expected: Kind the command must declare ("root" or "sub")

        Returns:
            Tuple of (command_name, builder)

        Raises:
            ModuleValidationError: If the module is missing, fails to import,
                defines no command, or the command has the wrong kind
        """
        directory = Path(directory)
        name = directory.name
        command_file = (directory / COMPILED_FILE_NAME).resolve()

        tag = version_tag(command_file)
        cached = self._cache.get(command_file)
        if tag is not None and cached is not None and cached[0] == tag:
            builder = cached[1]
        else:
            if tag is None:
                raise ModuleValidationError(
                    f'Command file "{command_file}" does not exist or is not a valid module.',
                    path=command_file,
                    expected=expected,
                )
            try:
                module = self._import(command_file)
            except Exception as e:
                raise ModuleValidationError(
                    f'Command file "{command_file}" does not exist or is not a valid module.',
                    path=command_file,
                    expected=expected,
                ) from e

            builder = getattr(module, EXPORT_NAME, None)
            if builder is None:
                raise ModuleValidationError(
                    f'Command file "{command_file}" does not export a "{EXPORT_NAME}".',
                    path=command_file,
                    expected=expected,
                )
            self._cache[command_file] = (tag, builder)
            logger.debug(f"Loaded command module {command_file}")

        actual = getattr(builder, "kind", None)
        if actual != expected:
            raise ModuleValidationError(
                f'Command file "{command_file}" does not export a {expected} command '
                f"(got {actual or type(builder).__name__}).",
                path=command_file,
                expected=expected,
                actual=actual,
            )
        return name, builder

    async def load(self, directory: Path, expected: CommandKind) -> tuple[str, CommandBuilder]:
        """Async wrapper around load_sync; the import runs in a worker thread."""
        return await asyncio.to_thread(self.load_sync, directory, expected)

    def invalidate(self, directory: Path | None = None) -> None:
        """Forget cached modules (all, or those for one directory)."""
        if directory is None:
            self._cache.clear()
        else:
            self._cache.pop((Path(directory) / COMPILED_FILE_NAME).resolve(), None)
