"""
Discord interaction payload types.

Only the fields used for routing are declared; everything else the API
sends is kept as extra data.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3
    APPLICATION_COMMAND_AUTOCOMPLETE = 4
    MODAL_SUBMIT = 5


class InteractionResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5


class ApplicationCommandOptionType(IntEnum):
    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11


class MessageFlags(IntEnum):
    CROSSPOSTED = 1 << 0
    SUPPRESS_EMBEDS = 1 << 2
    EPHEMERAL = 1 << 6
    SUPPRESS_NOTIFICATIONS = 1 << 12


class CommandOption(BaseModel):
    """One option of an invoked command; subcommands nest their own options."""

    model_config = ConfigDict(extra="allow")

    name: str
    type: int
    value: Any = None
    options: list["CommandOption"] = Field(default_factory=list)


class CommandData(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str
    type: int = 1
    options: list[CommandOption] = Field(default_factory=list)


class InteractionPayload(BaseModel):
    """Inbound interaction body."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: int
    application_id: Optional[str] = None
    token: str = ""
    data: Optional[CommandData] = None
    guild_id: Optional[str] = None
    channel_id: Optional[str] = None
    member: Optional[dict[str, Any]] = None
    user: Optional[dict[str, Any]] = None

    def is_ping(self) -> bool:
        return self.type == InteractionType.PING

    def is_command(self) -> bool:
        return self.type == InteractionType.APPLICATION_COMMAND and self.data is not None
