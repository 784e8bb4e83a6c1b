"""
Lifecycle hooks the host build exposes to plugins.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Union

logger = logging.getLogger(__name__)

Hook = Callable[[], Union[Awaitable[Any], Any]]


@dataclass
class BuildContext:
    """What the host is building when it runs the config transform."""

    is_server: bool = True
    runtime: str = "python"
    mode: str = "production"
    root: Any = None


@dataclass
class BuildHooks:
    """before_run callbacks run once before the host build, in order; a
    failure aborts the build. shutdown callbacks run when the host stops."""

    mode: str = "production"
    before_run: list[Hook] = field(default_factory=list)
    shutdown: list[Hook] = field(default_factory=list)

    async def run_before(self) -> None:
        for hook in self.before_run:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def run_shutdown(self) -> None:
        for hook in self.shutdown:
            try:
                result = hook()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.warning(f"Shutdown hook failed: {e}")
