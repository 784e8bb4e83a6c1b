"""
Core module for the slashtree package.

Provides command builders, permission flags and the exception hierarchy.
"""

from slashtree.core.builders import (
    CommandBuilder,
    CommandKind,
    SlashRootCommandBuilder,
    SlashSubCommandBuilder,
)
from slashtree.core.exceptions import (
    BuildError,
    ConfigurationError,
    DispatchResolutionError,
    InteractionAlreadyRepliedError,
    InteractionError,
    InteractionNotRepliedError,
    ModuleValidationError,
    RemoteAPIError,
    SlashTreeError,
)
from slashtree.core.flags import (
    ChannelFlagField,
    ChannelFlags,
    PermissionFlagField,
    PermissionFlags,
    ReadonlyPermissionFlagField,
)

__all__ = [
    # Builders
    "CommandBuilder",
    "CommandKind",
    "SlashRootCommandBuilder",
    "SlashSubCommandBuilder",
    # Flags
    "PermissionFlags",
    "ChannelFlags",
    "PermissionFlagField",
    "ReadonlyPermissionFlagField",
    "ChannelFlagField",
    # Exceptions
    "SlashTreeError",
    "ConfigurationError",
    "BuildError",
    "ModuleValidationError",
    "DispatchResolutionError",
    "RemoteAPIError",
    "InteractionError",
    "InteractionAlreadyRepliedError",
    "InteractionNotRepliedError",
]
