"""
slashtree - file-based Discord slash commands

Commands are plain Python files laid out by name::

    discord/commands/<root>/command.py
    discord/commands/<root>/<sub>/command.py
    discord/commands/<root>/<sub>/<subsub>/command.py

At build time the files are byte-compiled into an output directory; at
run time interactions are routed to the compiled modules along the
invoked path.

Example usage:
    # discord/commands/admin/command.py
    from slashtree import PermissionFlagField, PermissionFlags, SlashRootCommandBuilder

    async def execute(interaction):
        await interaction.defer(ephemeral=True)
        return {"invoked_by": interaction.user}

    command = SlashRootCommandBuilder(
        description="Admin tools",
        default_member_permissions=PermissionFlagField(PermissionFlags.ADMINISTRATOR),
        execute=execute,
    )

    # discord/commands/admin/kick/command.py
    from slashtree import SlashSubCommandBuilder

    async def execute(interaction, previous):
        await interaction.edit_reply(f"kicked by {previous['invoked_by'].username}")

    command = SlashSubCommandBuilder(description="Kick a member", execute=execute)
"""

__version__ = "0.1.0"

# Core exports
from slashtree.core import (
    BuildError,
    ChannelFlagField,
    ChannelFlags,
    ConfigurationError,
    DispatchResolutionError,
    InteractionAlreadyRepliedError,
    InteractionNotRepliedError,
    ModuleValidationError,
    PermissionFlagField,
    PermissionFlags,
    ReadonlyPermissionFlagField,
    RemoteAPIError,
    SlashRootCommandBuilder,
    SlashSubCommandBuilder,
    SlashTreeError,
)


# Heavier pieces are imported lazily so command modules stay cheap to load
def __getattr__(name):
    if name in ("add_command_compilation", "BuildOrchestrator"):
        from slashtree import build
        return getattr(build, name)
    if name in ("CommandImporter", "CommandTree"):
        from slashtree import commands
        return getattr(commands, name)
    if name in ("SlashCommandInteraction", "Dispatcher", "DiscordAPI"):
        from slashtree import interactions
        return getattr(interactions, name)
    if name == "create_app":
        from slashtree.server import create_app
        return create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Version
    "__version__",
    # Builders
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
    "InteractionAlreadyRepliedError",
    "InteractionNotRepliedError",
    # Lazy loaded
    "add_command_compilation",
    "BuildOrchestrator",
    "CommandImporter",
    "CommandTree",
    "SlashCommandInteraction",
    "Dispatcher",
    "DiscordAPI",
    "create_app",
]
