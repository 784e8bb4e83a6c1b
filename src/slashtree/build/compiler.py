"""
Build configuration and the default compiler.

The orchestrator treats the compiler as a black box: any callable taking a
BuildConfig (with its ``entry`` map filled in) and returning a BuildResult.
PyCompileCompiler byte-compiles each entry with py_compile, writing
``<output.path>/<entry name>.pyc``.
"""

from __future__ import annotations

import logging
import py_compile
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

INVALIDATION_MODES = {
    "timestamp": py_compile.PycInvalidationMode.TIMESTAMP,
    "checked-hash": py_compile.PycInvalidationMode.CHECKED_HASH,
    "unchecked-hash": py_compile.PycInvalidationMode.UNCHECKED_HASH,
}


class OutputOptions(BaseModel):
    """Where and how compiled entries are written."""

    path: Optional[Path] = None
    filename: str = "[name].pyc"
    library: str = Field(default="sourceless", description="Artifact format consumed by the loader")


class BuildConfig(BaseModel):
    """Host build configuration.

    ``plugins`` holds BuildPlugin instances; unknown keys from the host are
    kept so transforms can pass them through.
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    mode: str = "production"
    target: str = "python"
    entry: dict[str, Path] = Field(default_factory=dict)
    plugins: list[Any] = Field(default_factory=list)
    resolve: dict[str, Any] = Field(default_factory=dict)
    optimization: dict[str, Any] = Field(default_factory=dict)
    output: OutputOptions = Field(default_factory=OutputOptions)


class BuildResult(BaseModel):
    """Outcome of one compiler run."""

    success: bool
    outputs: list[Path] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    diagnostics: str = ""

    def has_errors(self) -> bool:
        return bool(self.errors)


Compiler = Callable[[BuildConfig], BuildResult]


class PyCompileCompiler:
    """Compile every entry of a BuildConfig to a sourceless .pyc file."""

    def __call__(self, config: BuildConfig) -> BuildResult:
        if config.output.path is None:
            return BuildResult(success=False, errors=["output.path is not set"],
                               diagnostics="output.path is not set")

        for plugin in config.plugins:
            hook = getattr(plugin, "before_compile", None)
            if hook is not None:
                hook(config)

        out_dir = Path(config.output.path)
        optimize = int(config.optimization.get("level", -1))
        mode = INVALIDATION_MODES[config.optimization.get("invalidation_mode", "checked-hash")]

        outputs: list[Path] = []
        errors: list[str] = []
        lines: list[str] = []
        for name, source in config.entry.items():
            target = out_dir / config.output.filename.replace("[name]", name)
            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                py_compile.compile(
                    str(source),
                    cfile=str(target),
                    dfile=str(source),
                    doraise=True,
                    optimize=optimize,
                    invalidation_mode=mode,
                )
            except py_compile.PyCompileError as e:
                errors.append(f"{name}: {e.msg}")
                lines.append(f"ERROR in {name} ({source})\n{e.msg}")
                continue
            except OSError as e:
                errors.append(f"{name}: {e}")
                lines.append(f"ERROR in {name} ({source})\n{e}")
                continue
            outputs.append(target)
            lines.append(f"  {name}.pyc <- {source}")

        summary = f"compiled {len(outputs)} of {len(config.entry)} entries"
        if errors:
            summary += f" with {len(errors)} error(s)"
        result = BuildResult(
            success=not errors,
            outputs=outputs,
            errors=errors,
            diagnostics="\n".join(lines + [summary]),
        )

        for plugin in config.plugins:
            hook = getattr(plugin, "after_compile", None)
            if hook is not None:
                hook(config, result)

        return result
