"""
Configuration management for slashtree.

Runtime settings are read from ``NDB_``-prefixed environment variables.
Build-time options (``CompilerOptions``) are resolved once when the command
compilation is attached to the host build and exported to the same
variables, so the serving process sees what the build used.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Default values - single source of truth
DEFAULTS = {
    "dist_dir": "dist/discordModules",
    "host_dist_dir": ".build",
    "api_base_url": "https://discord.com/api/v10",
    "interactions_path": "/api/interactions",
    "user_agent": "DiscordBot (https://github.com/slashtree/slashtree, 0.1.0)",
    "log_level": "INFO",
}


class Config(BaseSettings):
    """Settings consumed by the command loader, dispatcher and server.

    All values are resolved once and treated as read-only afterwards.
    """

    model_config = SettingsConfigDict(
        env_prefix="NDB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    discord_dist_dir: Path = Field(
        default_factory=lambda: Path.cwd() / DEFAULTS["dist_dir"],
        description="Absolute path of the compiled command modules",
    )
    post_commands: bool = Field(
        default=False,
        description="PUT the command tree to Discord on startup",
    )
    discord_bot_token: str = Field(default="", description="Bot token for REST calls")
    discord_public_key: str = Field(default="", description="Application public key (hex)")
    discord_client_id: str = Field(default="", description="Application client id")

    api_base_url: str = Field(default=DEFAULTS["api_base_url"])
    interactions_path: str = Field(default=DEFAULTS["interactions_path"])
    user_agent: str = Field(default=DEFAULTS["user_agent"])
    log_level: str = Field(default=DEFAULTS["log_level"], pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    @property
    def commands_dir(self) -> Path:
        """Root of the compiled command tree."""
        return Path(self.discord_dist_dir) / "commands"

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value with fallback to DEFAULTS, then to provided default."""
        value = getattr(self, key, None)
        if value is not None and value != "":
            return value
        return DEFAULTS.get(key, default)


class CompilerOptions(BaseModel):
    """Options for attaching command compilation to the host build."""

    dist_dir: Optional[str] = Field(
        default=None,
        description="Output directory for compiled modules (default: dist/discordModules)",
    )
    watch_mode: bool = Field(
        default=True,
        description="Watch the command directory during development builds",
    )
    post_commands: bool = Field(
        default=False,
        description="Register commands with Discord when the server starts",
    )
    client_id: Optional[str] = Field(default=None, description="Defaults to $DISCORD_CLIENT_ID")
    public_key: Optional[str] = Field(default=None, description="Defaults to $DISCORD_PUBLIC_KEY")
    bot_token: Optional[str] = Field(default=None, description="Defaults to $DISCORD_BOT_TOKEN")

    def resolved_dist_dir(self, root: Path | None = None) -> Path:
        root = root or Path.cwd()
        return (root / (self.dist_dir or DEFAULTS["dist_dir"])).resolve()

    def export_environment(self, root: Path | None = None) -> dict[str, str]:
        """Write the resolved options to the NDB_* environment variables.

        Returns:
            The variables that were set.
        """
        values = {
            "NDB_DISCORD_DIST_DIR": str(self.resolved_dist_dir(root)),
            "NDB_POST_COMMANDS": "1" if self.post_commands else "0",
            "NDB_DISCORD_BOT_TOKEN": self.bot_token or os.environ.get("DISCORD_BOT_TOKEN", ""),
            "NDB_DISCORD_PUBLIC_KEY": self.public_key or os.environ.get("DISCORD_PUBLIC_KEY", ""),
            "NDB_DISCORD_CLIENT_ID": self.client_id or os.environ.get("DISCORD_CLIENT_ID", ""),
        }
        os.environ.update(values)
        reset_config()
        return values


# Singleton instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the process-wide configuration, reading the environment once."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads it."""
    global _config
    _config = None
