from slashtree import SlashSubCommandBuilder


async def execute(interaction, previous):
    moderator = previous["moderator"]
    target = interaction.get_option("member", "nobody")
    await interaction.edit_reply(f"{target} was banned by {moderator.username if moderator else 'unknown'}")


command = SlashSubCommandBuilder(description="Ban a member", execute=execute)
