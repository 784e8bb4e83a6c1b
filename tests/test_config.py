#!/usr/bin/env python3
"""
Tests for configuration management module.
"""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from slashtree.config import DEFAULTS, CompilerOptions, Config, get_config, reset_config


# ============================================================================
# Config Model Tests
# ============================================================================

class TestConfig:
    """Tests for Config settings."""

    def test_defaults(self, clean_env, tmp_path, monkeypatch):
        """Test defaults when nothing is set in the environment."""
        monkeypatch.chdir(tmp_path)
        cfg = Config()
        assert cfg.discord_dist_dir == Path.cwd() / DEFAULTS["dist_dir"]
        assert cfg.post_commands is False
        assert cfg.discord_bot_token == ""
        assert cfg.api_base_url == DEFAULTS["api_base_url"]
        assert cfg.interactions_path == "/api/interactions"

    def test_reads_prefixed_environment(self, clean_env, tmp_path, monkeypatch):
        """Test values come from NDB_-prefixed variables."""
        monkeypatch.setenv("NDB_DISCORD_DIST_DIR", str(tmp_path / "out"))
        monkeypatch.setenv("NDB_POST_COMMANDS", "1")
        monkeypatch.setenv("NDB_DISCORD_CLIENT_ID", "1234")
        cfg = Config()
        assert cfg.discord_dist_dir == tmp_path / "out"
        assert cfg.post_commands is True
        assert cfg.discord_client_id == "1234"

    def test_unprefixed_variables_are_ignored(self, clean_env, monkeypatch):
        monkeypatch.setenv("DISCORD_BOT_TOKEN", "raw-token")
        assert Config().discord_bot_token == ""

    def test_commands_dir(self, tmp_path):
        cfg = Config(discord_dist_dir=tmp_path)
        assert cfg.commands_dir == tmp_path / "commands"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Config(log_level="LOUD")

    def test_get_falls_back_to_defaults(self, clean_env):
        """Test get method falls back to DEFAULTS for empty values."""
        cfg = Config(user_agent="")
        assert cfg.get("user_agent") == DEFAULTS["user_agent"]
        assert cfg.get("unknown_key", "default") == "default"


class TestConfigSingleton:
    """Tests for get_config/reset_config."""

    def test_cached(self, clean_env):
        assert get_config() is get_config()

    def test_reset_rereads_environment(self, clean_env, monkeypatch):
        assert get_config().discord_public_key == ""
        monkeypatch.setenv("NDB_DISCORD_PUBLIC_KEY", "abcd")
        # Still cached
        assert get_config().discord_public_key == ""
        reset_config()
        assert get_config().discord_public_key == "abcd"


# ============================================================================
# CompilerOptions Tests
# ============================================================================

class TestCompilerOptions:
    """Tests for build-time options."""

    def test_defaults(self):
        options = CompilerOptions()
        assert options.dist_dir is None
        assert options.watch_mode is True
        assert options.post_commands is False

    def test_resolved_dist_dir(self, tmp_path):
        assert CompilerOptions().resolved_dist_dir(tmp_path) == (tmp_path / "dist" / "discordModules").resolve()
        assert CompilerOptions(dist_dir="out/bot").resolved_dist_dir(tmp_path) == (tmp_path / "out" / "bot").resolve()

    def test_export_environment(self, clean_env, tmp_path):
        """Test exported variables are visible to the runtime config."""
        options = CompilerOptions(dist_dir="out", post_commands=True, client_id="42", bot_token="tok")
        values = options.export_environment(tmp_path)

        assert values["NDB_DISCORD_DIST_DIR"] == str((tmp_path / "out").resolve())
        assert os.environ["NDB_POST_COMMANDS"] == "1"

        cfg = get_config()
        assert cfg.discord_dist_dir == (tmp_path / "out").resolve()
        assert cfg.post_commands is True
        assert cfg.discord_client_id == "42"
        assert cfg.discord_bot_token == "tok"

    def test_export_falls_back_to_discord_variables(self, clean_env, tmp_path, monkeypatch):
        monkeypatch.setenv("DISCORD_PUBLIC_KEY", "feed")
        monkeypatch.setenv("DISCORD_CLIENT_ID", "99")
        values = CompilerOptions(client_id="7").export_environment(tmp_path)
        assert values["NDB_DISCORD_PUBLIC_KEY"] == "feed"
        # Explicit option wins
        assert values["NDB_DISCORD_CLIENT_ID"] == "7"
        assert values["NDB_DISCORD_BOT_TOKEN"] == ""

    def test_export_resets_cached_config(self, clean_env, tmp_path):
        before = get_config()
        CompilerOptions().export_environment(tmp_path)
        assert get_config() is not before
