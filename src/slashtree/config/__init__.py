"""Configuration management for slashtree."""

from slashtree.config.config import (
    DEFAULTS,
    CompilerOptions,
    Config,
    get_config,
    reset_config,
)

__all__ = [
    "DEFAULTS",
    "CompilerOptions",
    "Config",
    "get_config",
    "reset_config",
]
