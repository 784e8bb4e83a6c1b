from slashtree import SlashSubCommandBuilder


async def execute(interaction, previous):
    # Group level: pass the moderator context down unchanged
    return previous


command = SlashSubCommandBuilder(description="Act on a member", execute=execute)
