"""
Interaction handling: payload types, REST client, interaction context, dispatch.
"""

from slashtree.interactions.api import DiscordAPI
from slashtree.interactions.dispatcher import Dispatcher, derive_command_path
from slashtree.interactions.interaction import (
    EditMessageContent,
    FollowUpContent,
    Interaction,
    MessageContent,
    SlashCommandInteraction,
    timestamp_from_snowflake,
)
from slashtree.interactions.message import Message, User
from slashtree.interactions.types import (
    ApplicationCommandOptionType,
    InteractionPayload,
    InteractionResponseType,
    InteractionType,
)

__all__ = [
    "ApplicationCommandOptionType",
    "DiscordAPI",
    "Dispatcher",
    "EditMessageContent",
    "FollowUpContent",
    "Interaction",
    "InteractionPayload",
    "InteractionResponseType",
    "InteractionType",
    "Message",
    "MessageContent",
    "SlashCommandInteraction",
    "User",
    "derive_command_path",
    "timestamp_from_snowflake",
]
