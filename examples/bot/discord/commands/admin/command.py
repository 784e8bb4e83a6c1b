"""/admin - defers privately; subcommands finish the reply."""

from slashtree import PermissionFlagField, PermissionFlags, SlashRootCommandBuilder


async def execute(interaction):
    await interaction.defer(ephemeral=True)
    return {"moderator": interaction.user}


command = SlashRootCommandBuilder(
    description="Moderation tools",
    default_member_permissions=PermissionFlagField(
        PermissionFlags.KICK_MEMBERS,
        PermissionFlags.BAN_MEMBERS,
    ),
    dm_permission=False,
    execute=execute,
)
