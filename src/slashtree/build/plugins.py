"""
Build plugins.

Plugins are attached to a BuildConfig and receive compile hooks from the
compiler. The orchestrator identifies host plugins by class name, so a
plugin's class name is part of its contract.
"""

from __future__ import annotations

import ast
import json
import logging
from importlib.util import find_spec
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from slashtree.build.compiler import BuildConfig, BuildResult

logger = logging.getLogger(__name__)

TRACE_FILE_NAME = "trace.json"


class BuildPlugin:
    """Base class for build plugins. Both hooks are optional."""

    def before_compile(self, config: "BuildConfig") -> None:
        pass

    def after_compile(self, config: "BuildConfig", result: "BuildResult") -> None:
        pass


class TraceEntryPointsPlugin(BuildPlugin):
    """Records the local modules each compiled entry imports.

    After a successful compile, writes ``trace.json`` under
    output_tracing_root mapping every entry name to the source files inside
    root_dir that it imports, so deployments can ship them alongside the
    compiled commands.
    """

    def __init__(
        self,
        root_dir: Path,
        output_tracing_root: Path | None = None,
        trace_ignores: Iterable[str] = (),
    ):
        self.root_dir = Path(root_dir).resolve()
        self.output_tracing_root = Path(output_tracing_root).resolve() if output_tracing_root else None
        self.trace_ignores = list(trace_ignores)

    def after_compile(self, config: "BuildConfig", result: "BuildResult") -> None:
        if not result.success:
            return
        target = self.output_tracing_root or (config.output.path and Path(config.output.path))
        if target is None:
            return

        traces = {
            name: sorted(str(p) for p in self.trace(Path(source)))
            for name, source in config.entry.items()
        }
        target.mkdir(parents=True, exist_ok=True)
        (target / TRACE_FILE_NAME).write_text(json.dumps(traces, indent=2) + "\n")
        logger.debug(f"Wrote dependency trace for {len(traces)} entries")

    def trace(self, source: Path) -> set[Path]:
        """Source files under root_dir imported by source."""
        try:
            tree = ast.parse(source.read_text(encoding="utf-8"), filename=str(source))
        except (OSError, SyntaxError):
            return set()

        names: set[str] = set()
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                names.update(alias.name for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
                names.add(node.module)

        found: set[Path] = set()
        for name in names:
            if any(name == ig or name.startswith(f"{ig}.") for ig in self.trace_ignores):
                continue
            try:
                spec = find_spec(name)
            except (ImportError, ValueError):
                continue
            if spec is None or not spec.origin or spec.origin in ("built-in", "frozen"):
                continue
            origin = Path(spec.origin).resolve()
            if origin.is_relative_to(self.root_dir):
                found.add(origin)
        return found
