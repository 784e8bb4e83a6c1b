"""
Build-time pipeline: discovery, compilation and watch mode for command modules.
"""

from slashtree.build.compiler import BuildConfig, BuildResult, OutputOptions, PyCompileCompiler
from slashtree.build.hooks import BuildContext, BuildHooks
from slashtree.build.orchestrator import (
    BuildOrchestrator,
    add_command_compilation,
    attach_plugins,
    validate_dist_dir,
)
from slashtree.build.plugins import BuildPlugin, TraceEntryPointsPlugin
from slashtree.build.scanner import (
    COMMAND_FILE_NAME,
    COMPILED_FILE_NAME,
    artifact_path,
    entry_key,
    scan_command_files,
)

__all__ = [
    "BuildConfig",
    "BuildContext",
    "BuildHooks",
    "BuildOrchestrator",
    "BuildPlugin",
    "BuildResult",
    "COMMAND_FILE_NAME",
    "COMPILED_FILE_NAME",
    "OutputOptions",
    "PyCompileCompiler",
    "TraceEntryPointsPlugin",
    "add_command_compilation",
    "artifact_path",
    "attach_plugins",
    "entry_key",
    "scan_command_files",
    "validate_dist_dir",
]
