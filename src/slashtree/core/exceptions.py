"""
Exception classes for command compilation, loading and dispatch.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class SlashTreeError(Exception):
    """Base exception for all slashtree errors."""


class ConfigurationError(SlashTreeError):
    """Invalid configuration (e.g. an illegal output directory)."""


class BuildError(SlashTreeError):
    """A compilation pass over the command modules failed."""

    def __init__(self, message: str, diagnostics: str = ""):
        super().__init__(message)
        self.diagnostics = diagnostics


class ModuleValidationError(SlashTreeError):
    """A compiled command module is missing, broken, or has the wrong kind."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        expected: str | None = None,
        actual: str | None = None,
    ):
        super().__init__(message)
        self.path = path
        self.expected = expected
        self.actual = actual


class DispatchResolutionError(SlashTreeError):
    """An interaction's command path did not resolve to loaded commands."""

    def __init__(self, message: str, path: list[str] | None = None):
        super().__init__(message)
        self.path = path or []


class RemoteAPIError(SlashTreeError):
    """The Discord API answered with a non-success status."""

    def __init__(self, message: str, status: int, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body


class InteractionError(SlashTreeError):
    """Misuse of an interaction object."""


class InteractionAlreadyRepliedError(InteractionError):
    """reply() or defer() called on an interaction that was already answered."""


class InteractionNotRepliedError(InteractionError):
    """Reply editing attempted before the interaction was answered."""
