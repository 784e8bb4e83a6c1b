"""
Command tree - the loaded commands arranged by name, three levels deep.

    tree["admin"].root                     -> SlashRootCommandBuilder
    tree["admin"].sub["user"].root         -> SlashSubCommandBuilder
    tree["admin"].sub["user"].sub["ban"]   -> SlashSubCommandBuilder

CommandImporter builds trees from the output directory. load_all() loads
everything (used for registration); load_path() loads exactly one branch
(used per interaction) and shares no state between calls except the
loader's module cache.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Optional, Sequence

from slashtree.build.scanner import COMPILED_FILE_NAME
from slashtree.commands.loader import CommandModuleLoader
from slashtree.core.builders import CommandBuilder, SlashRootCommandBuilder, SlashSubCommandBuilder
from slashtree.core.exceptions import DispatchResolutionError, ModuleValidationError

logger = logging.getLogger(__name__)

MAX_PATH_LENGTH = 3


@dataclass(frozen=True)
class SubCommandNode:
    root: SlashSubCommandBuilder
    sub: Optional[Mapping[str, SlashSubCommandBuilder]] = None


@dataclass(frozen=True)
class RootCommandNode:
    root: SlashRootCommandBuilder
    sub: Optional[Mapping[str, SubCommandNode]] = None


class CommandTree(Mapping):
    """Read-only mapping of root command name to RootCommandNode."""

    def __init__(self, commands: dict[str, RootCommandNode] | None = None):
        self._commands = MappingProxyType(dict(commands or {}))

    def __getitem__(self, name: str) -> RootCommandNode:
        return self._commands[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __repr__(self) -> str:
        return f"CommandTree({list(self._commands)})"

    def paths(self) -> list[list[str]]:
        """Every invocable path in the tree, depth-first."""
        result: list[list[str]] = []
        for name, node in self._commands.items():
            result.append([name])
            for sub_name, sub_node in (node.sub or {}).items():
                result.append([name, sub_name])
                for leaf in sub_node.sub or {}:
                    result.append([name, sub_name, leaf])
        return result


def _subdirectories(directory: Path) -> list[Path]:
    return sorted(p for p in directory.iterdir() if p.is_dir() and not p.name.startswith((".", "_")))


def validate_path(parts: Sequence[str]) -> list[str]:
    """Check a dispatch path: 1 to 3 plain names.

    Raises:
        DispatchResolutionError: If the path is empty, too long, or a part
            is not a single directory name
    """
    parts = list(parts)
    if not 1 <= len(parts) <= MAX_PATH_LENGTH:
        raise DispatchResolutionError(
            f"Command path must have 1 to {MAX_PATH_LENGTH} parts, got {len(parts)}",
            path=parts,
        )
    for part in parts:
        if not part or part in (".", "..") or "/" in part or "\\" in part:
            raise DispatchResolutionError(f"Invalid command name: {part!r}", path=parts)
    return parts


@dataclass
class CommandImporter:
    """Loads command trees and branches from a compiled commands directory."""

    commands_dir: Path
    loader: CommandModuleLoader = field(default_factory=CommandModuleLoader)

    def __post_init__(self):
        self.commands_dir = Path(self.commands_dir)

    async def load_all(self) -> CommandTree:
        """
        Load every command in the output tree.

        A failing root or subcommand aborts the whole load. A failing
        sub-subcommand is logged and left out of the tree.

        Raises:
            ModuleValidationError: If the directory or any root/sub command
                cannot be loaded
        """
        if not self.commands_dir.is_dir():
            raise ModuleValidationError(
                f'Commands directory "{self.commands_dir}" does not exist.',
                path=self.commands_dir,
            )

        commands: dict[str, RootCommandNode] = {}
        for directory in _subdirectories(self.commands_dir):
            name, node = await self._load_root(directory)
            commands[name] = node

        logger.info(f"Loaded {len(commands)} root command(s) from {self.commands_dir}")
        return CommandTree(commands)

    async def _load_root(self, directory: Path) -> tuple[str, RootCommandNode]:
        name, builder = await self.loader.load(directory, "root")

        subdirs = [d for d in _subdirectories(directory) if (d / COMPILED_FILE_NAME).exists()]
        loaded = await asyncio.gather(*(self._load_sub(d) for d in subdirs))

        sub = dict(loaded) if loaded else None
        return name, RootCommandNode(root=builder, sub=MappingProxyType(sub) if sub else None)

    async def _load_sub(self, directory: Path) -> tuple[str, SubCommandNode]:
        name, builder = await self.loader.load(directory, "sub")

        subdirs = [d for d in _subdirectories(directory) if (d / COMPILED_FILE_NAME).exists()]
        results = await asyncio.gather(
            *(self.loader.load(d, "sub") for d in subdirs),
            return_exceptions=True,
        )

        leaves: dict[str, SlashSubCommandBuilder] = {}
        for subdir, result in zip(subdirs, results):
            if isinstance(result, BaseException):
                logger.warning(f"Skipping sub-subcommand {subdir}: {result}")
                continue
            leaf_name, leaf = result
            leaves[leaf_name] = leaf

        return name, SubCommandNode(root=builder, sub=MappingProxyType(leaves) if leaves else None)

    async def load_path(self, parts: Sequence[str]) -> list[CommandBuilder]:
        """
        Load exactly the commands along one path, root first.

        Args:
            parts: [root], [root, sub] or [root, sub, subsub]

        Returns:
            One builder per part

        Raises:
            DispatchResolutionError: If the path is malformed
            ModuleValidationError: If any level cannot be loaded
        """
        parts = validate_path(parts)
        builders: list[CommandBuilder] = []
        for i in range(len(parts)):
            directory = self.commands_dir.joinpath(*parts[: i + 1])
            _, builder = await self.loader.load(directory, "root" if i == 0 else "sub")
            builders.append(builder)
        return builders
