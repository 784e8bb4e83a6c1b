"""
Command builders - immutable descriptors pairing metadata with a handler.

A compiled command module exposes one builder as its module-level
``command`` attribute:

    # discord/commands/ping/command.py
    from slashtree import SlashRootCommandBuilder

    async def execute(interaction):
        await interaction.reply("pong")
        return "replied"

    command = SlashRootCommandBuilder(description="Ping the bot", execute=execute)

Each builder carries a ``kind`` discriminant ("root" or "sub") which the
loader checks against the position the module was loaded from.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from slashtree.core.flags import FlagField, ReadonlyPermissionFlagField

if TYPE_CHECKING:
    from slashtree.interactions.interaction import SlashCommandInteraction

CommandKind = Literal["root", "sub"]

# (interaction) -> value, sync or async
ExecuteFn = Callable[..., Any]
# (interaction, previous) -> value, sync or async
ExecuteFnWithPrev = Callable[..., Any]


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


class _CommandBuilder(BaseModel):
    """Fields shared by root and sub command builders."""

    model_config = ConfigDict(frozen=True, extra="allow", arbitrary_types_allowed=True)

    description: str = Field(description="Description shown in the Discord client")
    name_localizations: Optional[dict[str, str]] = None
    description_localizations: Optional[dict[str, str]] = None


class SlashRootCommandBuilder(_CommandBuilder):
    """Top-level command. The handler is optional."""

    kind: Literal["root"] = Field(default="root", exclude=True)
    execute: Optional[ExecuteFn] = Field(default=None, exclude=True)

    default_member_permissions: Optional[ReadonlyPermissionFlagField] = None
    dm_permission: Optional[bool] = None
    nsfw: Optional[bool] = None
    contexts: Optional[list[int]] = None
    integration_types: Optional[list[int]] = None

    @field_validator("default_member_permissions", mode="before")
    @classmethod
    def coerce_permissions(cls, v):
        # Always a private read-only copy, never the caller's field
        if v is None:
            return v
        if isinstance(v, FlagField):
            return ReadonlyPermissionFlagField(v.as_number())
        if isinstance(v, int):
            return ReadonlyPermissionFlagField(int(v))
        if isinstance(v, str) and v.isdigit():
            return ReadonlyPermissionFlagField(int(v))
        raise ValueError(f"Invalid permissions value: {v!r}")

    async def run(self, interaction: "SlashCommandInteraction") -> Any:
        """Invoke the handler if present; returns None when there is none."""
        if self.execute is None:
            return None
        return await _resolve(self.execute(interaction))

    def export(self) -> dict[str, Any]:
        """Registration payload for this command, without the handler.

        Permission masks are emitted as decimal strings.
        """
        data = self.model_dump(exclude_none=True)
        if self.default_member_permissions is not None:
            data["default_member_permissions"] = str(self.default_member_permissions.as_number())
        return data


class SlashSubCommandBuilder(_CommandBuilder):
    """Subcommand or sub-subcommand. The handler is required and receives
    the value returned by the parent level's handler."""

    kind: Literal["sub"] = Field(default="sub", exclude=True)
    execute: ExecuteFnWithPrev = Field(exclude=True)

    async def run(self, interaction: "SlashCommandInteraction", previous: Any = None) -> Any:
        return await _resolve(self.execute(interaction, previous))

    def export(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


CommandBuilder = Union[SlashRootCommandBuilder, SlashSubCommandBuilder]
