"""
FastAPI application receiving Discord interactions.

    from slashtree.server import create_app
    app = create_app()

Run with ``slashtree serve`` or any ASGI server.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from slashtree.commands.registration import post_commands
from slashtree.commands.tree import CommandImporter
from slashtree.config import Config, get_config
from slashtree.core.exceptions import ConfigurationError
from slashtree.interactions.api import DiscordAPI
from slashtree.interactions.dispatcher import Dispatcher
from slashtree.interactions.types import InteractionPayload, InteractionResponseType
from slashtree.server.verify import SIGNATURE_HEADER, TIMESTAMP_HEADER, verify_key

logger = logging.getLogger(__name__)


class InteractionEndpoint:
    """Verifies, parses and answers interaction requests."""

    def __init__(self, public_key: str, dispatcher: Dispatcher):
        if not public_key:
            raise ConfigurationError("No public key provided.")
        self.public_key = public_key
        self.dispatcher = dispatcher

    async def handle(self, request: Request) -> Response:
        body = await request.body()

        signature = request.headers.get(SIGNATURE_HEADER)
        timestamp = request.headers.get(TIMESTAMP_HEADER)
        if not signature or not timestamp or not verify_key(body, signature, timestamp, self.public_key):
            return Response(status_code=401)

        try:
            payload = InteractionPayload.model_validate_json(body)
        except ValidationError as e:
            logger.warning(f"Rejected malformed interaction body: {e.error_count()} error(s)")
            return Response(status_code=400)

        return self.handle_interaction(payload)

    def handle_interaction(self, payload: InteractionPayload) -> Response:
        if payload.is_ping():
            return JSONResponse({"type": int(InteractionResponseType.PONG)})

        if payload.is_command():
            # Acknowledge first; handlers answer through the REST callback
            self.dispatcher.dispatch(payload)
            return Response(status_code=202)

        logger.info(f"Received other interaction {payload.model_dump_json(indent=2)}")
        return Response(status_code=400)


def create_app(
    config: Optional[Config] = None,
    importer: Optional[CommandImporter] = None,
    api: Optional[DiscordAPI] = None,
    dispatcher: Optional[Dispatcher] = None,
) -> FastAPI:
    """
    Build the interactions application.

    Args:
        config: Settings (default: from the environment)
        importer: Command source (default: the configured output tree)
        api: REST client (default: built from config)
        dispatcher: Dispatcher (default: built from importer and api)

    Raises:
        ConfigurationError: If no public key is configured
    """
    config = config or get_config()
    api = api or DiscordAPI.from_config(config)
    importer = importer or CommandImporter(config.commands_dir)
    dispatcher = dispatcher or Dispatcher(importer, api, application_id=config.discord_client_id or None)
    endpoint = InteractionEndpoint(config.discord_public_key, dispatcher)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        logger.info(f"Serving interactions on {config.interactions_path}")
        if config.post_commands:
            tree = await importer.load_all()
            await post_commands(tree, config, api)

        yield

        await dispatcher.drain()
        await api.aclose()

    app = FastAPI(title="slashtree", lifespan=lifespan)
    app.add_api_route(config.interactions_path, endpoint.handle, methods=["POST"], include_in_schema=False)
    app.state.dispatcher = dispatcher
    app.state.importer = importer
    return app
