"""
Interaction dispatcher - routes slash command invocations to handlers.

The invoked command's subcommand options give a 1-3 part path mirroring
the command directory layout. The builders along that path run in order,
root first; each sub handler receives the value returned by the level
above it.

Dispatch runs detached from the HTTP request that delivered the
interaction: the request is acknowledged first, and handler failures are
reported through the log only.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol, Sequence

from slashtree.core.builders import CommandBuilder
from slashtree.core.exceptions import DispatchResolutionError, ModuleValidationError
from slashtree.interactions.api import DiscordAPI
from slashtree.interactions.interaction import SlashCommandInteraction
from slashtree.interactions.types import ApplicationCommandOptionType, CommandData, InteractionPayload
from slashtree.logging import log_exception

logger = logging.getLogger(__name__)


class CommandResolver(Protocol):
    async def load_path(self, parts: Sequence[str]) -> list[CommandBuilder]: ...


def derive_command_path(data: CommandData) -> list[str]:
    """
    Command path of an invocation: [root], [root, sub] or [root, group, sub].
    """
    parts = [data.name]
    first = data.options[0] if data.options else None
    if first is not None and first.type in (
        ApplicationCommandOptionType.SUB_COMMAND,
        ApplicationCommandOptionType.SUB_COMMAND_GROUP,
    ):
        parts.append(first.name)
        nested = first.options[0] if first.options else None
        if nested is not None and nested.type == ApplicationCommandOptionType.SUB_COMMAND:
            parts.append(nested.name)
    return parts


class Dispatcher:
    """Runs command handlers for inbound slash command interactions."""

    def __init__(
        self,
        resolver: CommandResolver,
        api: DiscordAPI,
        application_id: Optional[str] = None,
    ):
        self.resolver = resolver
        self.api = api
        self.application_id = application_id
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def run(self, payload: InteractionPayload) -> Any:
        """
        Resolve and execute the handlers for one interaction.

        Returns:
            The value returned by the last handler

        Raises:
            DispatchResolutionError: If the command path cannot be loaded
        """
        if payload.data is None:
            raise DispatchResolutionError(f"Interaction {payload.id} carries no command data")

        path = derive_command_path(payload.data)
        interaction = SlashCommandInteraction(payload, self.api, self.application_id)

        try:
            builders = await self.resolver.load_path(path)
        except ModuleValidationError as e:
            raise DispatchResolutionError(
                f"Command /{' '.join(path)} could not be resolved: {e}",
                path=path,
            ) from e

        previous: Any = None
        for level, builder in enumerate(builders):
            if level == 0:
                previous = await builder.run(interaction)
            else:
                previous = await builder.run(interaction, previous)
        return previous

    def dispatch(self, payload: InteractionPayload) -> asyncio.Task:
        """Start handling an interaction in a background task and return it."""
        task = asyncio.create_task(self._run_detached(payload), name=f"interaction:{payload.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_detached(self, payload: InteractionPayload) -> Any:
        try:
            return await self.run(payload)
        except Exception as e:
            name = payload.data.name if payload.data else "?"
            log_exception(e, context=f"Interaction {payload.id} (/{name}) failed", logger=logger)
            return None

    async def drain(self) -> None:
        """Wait for every in-flight dispatch to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
