"""Discord REST client.

One request() entry point over a shared httpx.AsyncClient; every other
outbound call in the package goes through it.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from slashtree.config import DEFAULTS, Config, get_config
from slashtree.core.exceptions import RemoteAPIError

logger = logging.getLogger(__name__)


class DiscordAPI:
    """Thin async wrapper around the Discord HTTP API."""

    def __init__(
        self,
        token: str = "",
        base_url: str = DEFAULTS["api_base_url"],
        user_agent: str = DEFAULTS["user_agent"],
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @classmethod
    def from_config(cls, config: Config | None = None, client: Optional[httpx.AsyncClient] = None) -> "DiscordAPI":
        config = config or get_config()
        return cls(
            token=config.discord_bot_token,
            base_url=config.api_base_url,
            user_agent=config.user_agent,
            client=client,
        )

    async def request(
        self,
        endpoint: str,
        method: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Send one request and decode the JSON response.

        Args:
            endpoint: Path relative to the API base, e.g. "applications/1/commands"
            method: HTTP method
            body: JSON-serializable request body
            headers: Extra headers, override the defaults

        Returns:
            Decoded JSON body, or None for 204 responses

        Raises:
            RemoteAPIError: On any non-2xx response
        """
        request_headers = {
            "User-Agent": self.user_agent,
            "Content-Type": "application/json",
        }
        if self.token:
            request_headers["Authorization"] = f"Bot {self.token}"
        if headers:
            request_headers.update(headers)

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        logger.debug(f"{method} {url}")
        response = await self._client.request(
            method,
            url,
            headers=request_headers,
            content=json.dumps(body) if body is not None else None,
        )

        if not response.is_success:
            try:
                error_body: Any = response.json()
            except ValueError:
                error_body = response.text
            raise RemoteAPIError(
                f"Discord API request failed: {response.status_code} {response.reason_phrase}\n"
                + (json.dumps(error_body, indent=2) if not isinstance(error_body, str) else error_body),
                status=response.status_code,
                body=error_body,
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "DiscordAPI":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
