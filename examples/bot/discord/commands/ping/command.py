"""/ping - replies with the time since the interaction was created."""

from datetime import datetime, timezone

from slashtree import SlashRootCommandBuilder


async def execute(interaction):
    elapsed = datetime.now(timezone.utc) - interaction.created_at
    await interaction.reply(f"Pong! ({elapsed.total_seconds() * 1000:.0f} ms)")


command = SlashRootCommandBuilder(description="Check that the bot is alive", execute=execute)
