"""
Bulk registration of the command tree with Discord.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from slashtree.commands.tree import CommandTree
from slashtree.config import Config
from slashtree.core.exceptions import ConfigurationError
from slashtree.interactions.types import ApplicationCommandOptionType

if TYPE_CHECKING:
    from slashtree.interactions.api import DiscordAPI

logger = logging.getLogger(__name__)


def build_registration_payload(tree: CommandTree) -> list[dict[str, Any]]:
    """Convert a loaded tree into the body of the bulk overwrite call.

    Subcommands with children become subcommand groups. Argument options
    are not generated, so leaf option lists are empty.
    """
    payload: list[dict[str, Any]] = []
    for name, node in tree.items():
        options: list[dict[str, Any]] = []
        for sub_name, sub_node in (node.sub or {}).items():
            if sub_node.sub:
                options.append({
                    **sub_node.root.export(),
                    "name": sub_name,
                    "type": int(ApplicationCommandOptionType.SUB_COMMAND_GROUP),
                    "options": [
                        {
                            **leaf.export(),
                            "name": leaf_name,
                            "type": int(ApplicationCommandOptionType.SUB_COMMAND),
                            "options": [],
                        }
                        for leaf_name, leaf in sub_node.sub.items()
                    ],
                })
            else:
                options.append({
                    **sub_node.root.export(),
                    "name": sub_name,
                    "type": int(ApplicationCommandOptionType.SUB_COMMAND),
                    "options": [],
                })

        payload.append({**node.root.export(), "name": name, "options": options})
    return payload


async def post_commands(tree: CommandTree, config: Config, api: "DiscordAPI") -> list[dict[str, Any]]:
    """
    Overwrite the application's global commands with the given tree.

    Returns:
        The registered commands as returned by Discord

    Raises:
        ConfigurationError: If the bot token or client id is missing
        RemoteAPIError: If Discord rejects the request
    """
    if not config.discord_bot_token or not config.discord_client_id:
        raise ConfigurationError("No bot token or client id provided.")

    payload = build_registration_payload(tree)
    result = await api.request(
        f"applications/{config.discord_client_id}/commands",
        "PUT",
        payload,
    )
    logger.info(f"Posted {len(payload)} commands")
    return result or []
