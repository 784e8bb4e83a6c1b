"""
Interaction context handed to command handlers.

Handlers answer through the interaction callback endpoint (reply/defer)
and manage the original response and follow-ups through the webhook
endpoints:

    async def execute(interaction):
        await interaction.defer(ephemeral=True)
        ...
        await interaction.edit_reply("done")
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from slashtree.core.exceptions import InteractionAlreadyRepliedError, InteractionNotRepliedError
from slashtree.interactions.api import DiscordAPI
from slashtree.interactions.message import Message, User
from slashtree.interactions.types import (
    ApplicationCommandOptionType,
    CommandOption,
    InteractionPayload,
    InteractionResponseType,
    InteractionType,
    MessageFlags,
)

logger = logging.getLogger(__name__)

DISCORD_EPOCH_MS = 1420070400000

SUBCOMMAND_TYPES = (
    ApplicationCommandOptionType.SUB_COMMAND,
    ApplicationCommandOptionType.SUB_COMMAND_GROUP,
)


def timestamp_from_snowflake(snowflake: str | int) -> datetime:
    """Creation time encoded in a Discord snowflake id."""
    ms = (int(snowflake) >> 22) + DISCORD_EPOCH_MS
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


class MessageContent(BaseModel):
    """Message body for reply() and follow_up()."""

    content: str
    tts: Optional[bool] = None
    ephemeral: bool = False
    suppress_embeds: bool = False
    suppress_notifications: bool = False
    with_response: bool = Field(default=False, description="reply() returns the created message")

    def flags(self) -> int:
        flags = int(MessageFlags.CROSSPOSTED)
        if self.suppress_embeds:
            flags |= MessageFlags.SUPPRESS_EMBEDS
        if self.ephemeral:
            flags |= MessageFlags.EPHEMERAL
        if self.suppress_notifications:
            flags |= MessageFlags.SUPPRESS_NOTIFICATIONS
        return flags

    def to_message_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {"flags": self.flags(), "content": self.content}
        if self.tts is not None:
            data["tts"] = self.tts
        return data


class FollowUpContent(MessageContent):
    thread_name: Optional[str] = None
    applied_tags: Optional[list[str]] = None


class EditMessageContent(BaseModel):
    content: Optional[str] = None


class BaseInteraction:
    """State and REST operations shared by all interaction kinds."""

    def __init__(
        self,
        payload: InteractionPayload | dict[str, Any],
        api: DiscordAPI,
        application_id: Optional[str] = None,
    ):
        if isinstance(payload, dict):
            payload = InteractionPayload.model_validate(payload)
        self.payload = payload
        self.api = api
        self.application_id = payload.application_id or application_id or ""
        self.replied = False
        self.created_at = timestamp_from_snowflake(payload.id)

    @property
    def id(self) -> str:
        return self.payload.id

    @property
    def token(self) -> str:
        return self.payload.token

    @property
    def guild_id(self) -> Optional[str]:
        return self.payload.guild_id

    @property
    def channel_id(self) -> Optional[str]:
        return self.payload.channel_id

    @property
    def user(self) -> Optional[User]:
        """Invoking user (from the member object in guilds)."""
        if self.payload.member and self.payload.member.get("user"):
            return User(self.payload.member["user"])
        if self.payload.user:
            return User(self.payload.user)
        return None

    def _mark_replied(self) -> None:
        if self.replied:
            raise InteractionAlreadyRepliedError("Already replied to this interaction.")
        self.replied = True

    def _require_replied(self) -> None:
        if not self.replied:
            raise InteractionNotRepliedError("Not replied to this interaction yet.")

    @property
    def _original_endpoint(self) -> str:
        return f"webhooks/{self.application_id}/{self.token}/messages/@original"

    async def _callback(self, body: dict[str, Any], with_response: bool) -> Optional[Message]:
        endpoint = f"interactions/{self.id}/{self.token}/callback"
        if with_response:
            endpoint += "?with_response=true"
        result = await self.api.request(endpoint, "POST", body)
        logger.debug(f"Interaction {self.id} answered with response type {body['type']}")

        if not with_response:
            return None
        message = ((result or {}).get("resource") or {}).get("message")
        if message:
            return Message(message)
        return await self.get_reply()

    async def reply(self, content: Union[str, MessageContent]) -> Optional[Message]:
        """
        Reply to the interaction with a message.

        Args:
            content: Message text, or MessageContent for flags and options

        Returns:
            The created message when content.with_response is set, else None

        Raises:
            InteractionAlreadyRepliedError: If reply() or defer() was already called
        """
        self._mark_replied()

        if isinstance(content, str):
            data: dict[str, Any] = {"content": content}
            with_response = False
        else:
            data = content.to_message_data()
            with_response = content.with_response

        body = {"type": int(InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE), "data": data}
        return await self._callback(body, with_response)

    async def defer(self, ephemeral: bool = False, with_response: bool = False) -> Optional[Message]:
        """
        Acknowledge the interaction now and send the message later.

        Raises:
            InteractionAlreadyRepliedError: If reply() or defer() was already called
        """
        self._mark_replied()

        body = {
            "type": int(InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE),
            "data": {"flags": int(MessageFlags.EPHEMERAL) if ephemeral else 0},
        }
        return await self._callback(body, with_response)

    async def get_reply(self) -> Optional[Message]:
        """The original response message, or None if not replied yet."""
        if not self.replied:
            return None
        data = await self.api.request(self._original_endpoint, "GET")
        return Message(data)

    async def edit_reply(self, content: Union[str, EditMessageContent, dict[str, Any]]) -> Message:
        """Edit the original response message."""
        self._require_replied()

        if isinstance(content, str):
            body: dict[str, Any] = {"content": content}
        elif isinstance(content, EditMessageContent):
            body = content.model_dump(exclude_none=True)
        else:
            body = content

        data = await self.api.request(self._original_endpoint, "PATCH", body)
        return Message(data)

    async def delete_reply(self) -> None:
        """Delete the original response message."""
        self._require_replied()
        await self.api.request(self._original_endpoint, "DELETE")

    async def follow_up(self, content: Union[str, FollowUpContent]) -> Message:
        """Send an additional message for this interaction."""
        if isinstance(content, str):
            body: dict[str, Any] = {"content": content}
        else:
            body = content.to_message_data()
            if content.thread_name is not None:
                body["thread_name"] = content.thread_name
            if content.applied_tags is not None:
                body["applied_tags"] = content.applied_tags

        data = await self.api.request(f"webhooks/{self.application_id}/{self.token}", "POST", body)
        return Message(data)


class Interaction(BaseInteraction):
    """Any interaction."""

    def is_command(self) -> bool:
        return self.payload.type == InteractionType.APPLICATION_COMMAND


class SlashCommandInteraction(BaseInteraction):
    """A slash command invocation."""

    @property
    def command_name(self) -> str:
        return self.payload.data.name if self.payload.data else ""

    @property
    def options(self) -> list[CommandOption]:
        """Argument options of the invoked (leaf) command."""
        options = self.payload.data.options if self.payload.data else []
        # Descend through subcommand groups and subcommands
        while options and options[0].type in SUBCOMMAND_TYPES:
            options = options[0].options
        return options

    def get_option(self, name: str, default: Any = None) -> Any:
        """Value of the named argument option."""
        for option in self.options:
            if option.name == name:
                return option.value
        return default
