"""
Build orchestration for command modules.

BuildOrchestrator is attached to the host build as a plugin. It compiles
every ``command.py`` under the command directory into an isolated output
directory, either once before the host build runs or continuously while a
development build is being watched.

    host_config = add_command_compilation({}, CompilerOptions(dist_dir="dist/bot"))
    config = host_config["transform"](BuildConfig(), BuildContext(mode="production"))
    hooks = BuildHooks(mode="production")
    attach_plugins(config, hooks)
    await hooks.run_before()
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Optional

from slashtree.build.compiler import BuildConfig, Compiler, OutputOptions, PyCompileCompiler
from slashtree.build.hooks import BuildContext, BuildHooks
from slashtree.build.plugins import TraceEntryPointsPlugin
from slashtree.build.scanner import COMMAND_FILE_NAME, artifact_path, entry_key, scan_command_files
from slashtree.build.watcher import CommandWatcher
from slashtree.config import DEFAULTS, CompilerOptions
from slashtree.core.exceptions import BuildError, ConfigurationError

logger = logging.getLogger(__name__)

# Host plugins that are irrelevant or harmful in an isolated server bundle
PLUGIN_DENYLIST = [
    "PagesManifestPlugin",
    "MiddlewarePlugin",
    "FlightClientEntryPlugin",
    "NextTypesPlugin",
    "TelemetryPlugin",
    "DropClientPage",
    "TraceEntryPointsPlugin",
]

# Top-level directories holding sources when the project has no src/ dir
SOURCE_DIRS = ("app", "pages", "types", "discord")

IGNORED_EVENTS = {"addDir", "unlinkDir", "ready", "raw", "all"}

BANNER = """
    ##############
   ################
  ##################
 ####################
 ######  ####  ######
 ###### ###### ######
 ####################
 ####################
    ###        ###
"""


def normalize_path(path: str) -> str:
    return path.replace("\\", "/")


def get_commands_base(root: Path) -> Path:
    """Directory holding ``commands/``: src/discord if src/ exists, else discord."""
    if (root / "src").is_dir():
        return root / "src" / "discord"
    return root / "discord"


def validate_dist_dir(dist_dir: Optional[str], host_dist_dir: Optional[str], root: Path) -> None:
    """
    Reject output directories that could clobber the project.

    The directory must be non-empty, strictly inside root, outside the
    source directories and not the host build directory. None means the
    default is used and skips validation.

    Raises:
        ConfigurationError: If the directory is not allowed
    """
    if dist_dir is None:
        return

    try:
        normalized = normalize_path(dist_dir).rstrip("/")
        if normalized == "":
            raise ConfigurationError("Illegal dist_dir path: empty path")

        root = Path(root).resolve()
        resolved = Path(os.path.normpath(root / normalized))
        if not resolved.is_relative_to(root):
            raise ConfigurationError("dist_dir must be within the project root")
        if resolved == root:
            raise ConfigurationError("dist_dir cannot be the project root")

        top = resolved.relative_to(root).parts[0]
        if (root / "src").is_dir():
            if top == "src":
                raise ConfigurationError('Illegal dist_dir path: conflict with "src" directory')
        elif top in SOURCE_DIRS:
            raise ConfigurationError(
                f'Illegal dist_dir path: conflict with source files inside "{top}"'
            )

        # The configured host build dir and the host's default are both reserved
        for host_dist in {host_dist_dir or DEFAULTS["host_dist_dir"], DEFAULTS["host_dist_dir"]}:
            host_dir = Path(os.path.normpath(root / normalize_path(host_dist)))
            if resolved.is_relative_to(host_dir):
                raise ConfigurationError(
                    f'Illegal dist_dir path: conflict with host build directory "{host_dist}"'
                )
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f'Error in dist_dir path: "{dist_dir}"') from e


class BuildOrchestrator:
    """Compiles command modules for the host build.

    The mode is fixed when apply() is called: watch mode for development
    builds with watch_mode enabled, otherwise a single compilation pass
    before the host build runs.
    """

    def __init__(
        self,
        build_config: BuildConfig,
        options: CompilerOptions | None = None,
        host_dist_dir: Optional[str] = None,
        root: Path | None = None,
        compiler: Compiler | None = None,
    ):
        self.options = options or CompilerOptions()
        self.root = Path(root or Path.cwd()).resolve()

        # Must fail before anything on disk is touched
        validate_dist_dir(self.options.dist_dir, host_dist_dir, self.root)

        self.dist_dir = self.options.resolved_dist_dir(self.root)
        self._purge_dist_dir()

        self.base_path = get_commands_base(self.root)
        self.commands_path = self.base_path / "commands"
        self.compiler: Compiler = compiler or PyCompileCompiler()
        self.build_config = self._sanitize(build_config)
        self.command_files: list[Path] = []
        self.watcher: Optional[CommandWatcher] = None
        self._lock = asyncio.Lock()

    def _purge_dist_dir(self) -> None:
        if not self.dist_dir.exists():
            return
        try:
            shutil.rmtree(self.dist_dir)
        except OSError as e:
            logger.warning(f"Failed to clear previous dist_dir {self.dist_dir}: {e}")

    def _sanitize(self, config: BuildConfig) -> BuildConfig:
        """Copy of the host config suited to an isolated command build."""
        plugins = [p for p in config.plugins if type(p).__name__ not in PLUGIN_DENYLIST]

        trace = next(
            (p for p in config.plugins if type(p).__name__ == "TraceEntryPointsPlugin"),
            None,
        )
        if trace is not None:
            plugin_cls = type(trace)
            plugins.append(
                plugin_cls(
                    root_dir=getattr(trace, "root_dir", self.root),
                    output_tracing_root=self.dist_dir,
                    trace_ignores=getattr(trace, "trace_ignores", []),
                )
            )

        return config.model_copy(
            update={
                "target": "python",
                "entry": {},
                "resolve": dict(config.resolve),
                "optimization": {
                    **config.optimization,
                    "runtime_chunk": False,
                    "invalidation_mode": "checked-hash",
                },
                "output": OutputOptions(path=self.dist_dir, filename="[name].pyc", library="sourceless"),
                "plugins": plugins,
            }
        )

    @property
    def watching(self) -> bool:
        return self.watcher is not None

    def apply(self, hooks: BuildHooks) -> None:
        """Register with the host build's lifecycle hooks."""
        if self.options.watch_mode and hooks.mode == "development":
            hooks.before_run.append(self.start_watching)
            hooks.shutdown.append(self.close)
        else:
            hooks.before_run.append(lambda: self.compile_commands(is_dev=False))

    async def start_watching(self) -> None:
        """Start the watcher; existing files are reported as add events."""
        if self.watcher is not None:
            return
        self.watcher = CommandWatcher(self.base_path, self.handle_event, ignore_initial=False)
        self.watcher.start()
        logger.info(f"Watching {self.base_path} for command changes")

    async def close(self) -> None:
        """Stop the watcher, if any."""
        if self.watcher is not None:
            await self.watcher.close()
            self.watcher = None

    def build_entries(self) -> dict[str, Path]:
        """Re-scan the command directory and map entry names to sources."""
        self.command_files = scan_command_files(self.commands_path)
        return {entry_key(path, self.base_path): path for path in self.command_files}

    async def compile_commands(self, is_dev: bool = False) -> None:
        """
        Run one full discovery and compilation pass.

        Raises:
            BuildError: If the compiler fails or reports errors
        """
        async with self._lock:
            if not is_dev:
                logger.info(BANNER)

            entries = self.build_entries()
            if not is_dev:
                logger.info(f"Building Discord modules: {[str(p) for p in self.command_files]}")

            full_config = self.build_config.model_copy(update={"entry": entries})
            try:
                result = await asyncio.to_thread(self.compiler, full_config)
            except Exception as e:
                logger.error(f"{e}")
                logger.error("Discord module build failed")
                raise BuildError("Discord module build failed", diagnostics=str(e)) from e

            if not result.success or result.has_errors():
                logger.error(result.diagnostics)
                logger.error("Discord module build failed")
                raise BuildError("Discord module build failed", diagnostics=result.diagnostics)

            if not is_dev:
                logger.info(result.diagnostics)
                logger.info("Discord module build done")

    async def handle_event(self, event: str, path: Path) -> None:
        """React to one watcher event."""
        if event in IGNORED_EVENTS:
            return

        path = Path(path)
        if event == "unlink" and path.name == COMMAND_FILE_NAME:
            self.remove_artifact(path)
            return

        try:
            relative = normalize_path(os.path.relpath(path, self.root))
        except ValueError:
            relative = str(path)
        logger.info(f"{f'[{event.upper()}]':>10} {relative} - Rebuilding...")

        try:
            await self.compile_commands(is_dev=True)
        except BuildError:
            # Previous artifacts stay in place; details were already logged
            pass

    def remove_artifact(self, source: Path) -> list[Path]:
        """
        Delete the compiled artifact of a removed command file.

        Parent directories left empty are removed as well, up to but not
        including the output root.

        Returns:
            Paths that were deleted
        """
        try:
            key = entry_key(source, self.base_path)
        except ValueError:
            return []

        compiled = artifact_path(self.dist_dir, key)
        removed: list[Path] = []
        if not compiled.exists():
            return removed

        try:
            compiled.unlink()
            removed.append(compiled)

            directory = compiled.parent
            while directory != self.dist_dir and directory.is_relative_to(self.dist_dir) and directory.exists():
                if any(directory.iterdir()):
                    break
                directory.rmdir()
                removed.append(directory)
                directory = directory.parent
        except OSError as e:
            logger.warning(f"Failed to delete dist file {compiled}: {e}")

        return removed


def attach_plugins(config: BuildConfig, hooks: BuildHooks) -> None:
    """Let every plugin that supports it register lifecycle hooks."""
    for plugin in config.plugins:
        apply = getattr(plugin, "apply", None)
        if callable(apply):
            apply(hooks)


def add_command_compilation(
    host_config: dict[str, Any],
    options: CompilerOptions | None = None,
    root: Path | None = None,
) -> dict[str, Any]:
    """
    Extend a host configuration with command compilation.

    Exports the runtime settings to the environment and wraps the host's
    ``transform`` so that server builds get a BuildOrchestrator plugin. A
    user transform already present runs first.

    Args:
        host_config: Host configuration dict; may contain ``transform`` and ``dist_dir``
        options: Compilation options
        root: Project root (default: current directory)

    Returns:
        New host configuration dict
    """
    options = options or CompilerOptions()
    root = Path(root or Path.cwd()).resolve()
    options.export_environment(root)

    user_transform = host_config.get("transform")

    def transform(config: BuildConfig, context: BuildContext) -> BuildConfig:
        if callable(user_transform):
            config = user_transform(config, context)

        if not context.is_server or context.runtime == "edge":
            return config

        orchestrator = BuildOrchestrator(
            config,
            options,
            host_dist_dir=host_config.get("dist_dir"),
            root=Path(context.root) if context.root else root,
        )
        return config.model_copy(update={"plugins": [*config.plugins, orchestrator]})

    return {**host_config, "transform": transform}
