from slashtree import SlashSubCommandBuilder


def execute(interaction, previous):
    return interaction.edit_reply("Role management is not set up on this server.")


command = SlashSubCommandBuilder(description="Manage roles", execute=execute)
