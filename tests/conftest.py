"""
Shared fixtures: command source trees, compiled output trees, signing keys.
"""

import json as json_module
import py_compile
from pathlib import Path
from textwrap import dedent

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from slashtree.interactions.api import DiscordAPI


ROOT_SOURCE = '''
from slashtree import SlashRootCommandBuilder

command = SlashRootCommandBuilder(description="{description}")
'''

SUB_SOURCE = '''
from slashtree import SlashSubCommandBuilder

def execute(interaction, previous):
    return previous

command = SlashSubCommandBuilder(description="{description}", execute=execute)
'''


def root_source(description: str = "root command") -> str:
    return ROOT_SOURCE.format(description=description)


def sub_source(description: str = "sub command") -> str:
    return SUB_SOURCE.format(description=description)


def write_sources(base: Path, files: dict[str, str]) -> list[Path]:
    """Write command.py files; keys are paths like "ping" or "admin/user"."""
    written = []
    for rel, source in files.items():
        path = base.joinpath(*rel.split("/"), "command.py")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(source))
        written.append(path)
    return written


@pytest.fixture
def compiled_commands(tmp_path):
    """Factory building a compiled commands directory from sources.

    Returns the ``<dist>/commands`` directory.
    """
    def build(files: dict[str, str]) -> Path:
        src = tmp_path / "sources"
        dist = tmp_path / "dist" / "commands"
        for path in write_sources(src, files):
            rel = path.relative_to(src).with_suffix(".pyc")
            target = dist / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            py_compile.compile(str(path), cfile=str(target), doraise=True)
        return dist

    return build


@pytest.fixture
def project(tmp_path):
    """Project root with discord/commands/ sources (no src/ directory)."""
    def build(files: dict[str, str]) -> Path:
        write_sources(tmp_path / "discord" / "commands", files)
        return tmp_path

    return build


@pytest.fixture
def clean_env(monkeypatch):
    """Remove slashtree and Discord variables for the duration of a test."""
    for var in (
        "NDB_DISCORD_DIST_DIR",
        "NDB_POST_COMMANDS",
        "NDB_DISCORD_BOT_TOKEN",
        "NDB_DISCORD_PUBLIC_KEY",
        "NDB_DISCORD_CLIENT_ID",
        "DISCORD_BOT_TOKEN",
        "DISCORD_PUBLIC_KEY",
        "DISCORD_CLIENT_ID",
    ):
        # setenv first so values exported during the test are rolled back
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
    from slashtree.config import reset_config
    reset_config()
    yield
    reset_config()


@pytest.fixture
def signing_key():
    """(private_key, public_key_hex) pair for signing interaction requests."""
    private_key = Ed25519PrivateKey.generate()
    public_hex = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    ).hex()
    return private_key, public_hex


def command_payload(name: str = "admin", options: list | None = None, **extra) -> dict:
    """Slash command interaction body as Discord sends it."""
    payload = {
        "id": "175928847299117063",
        "type": 2,
        "application_id": "app-id",
        "token": "interaction-token",
        "data": {"id": "1", "name": name, "type": 1, "options": options or []},
        "member": {"user": {"id": "80351110224678912", "username": "mod"}},
    }
    payload.update(extra)
    return payload


class MockDiscord:
    """Records outbound API requests and answers from a queue (204 when empty)."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []
        self.api = DiscordAPI(
            token="bot-token",
            client=httpx.AsyncClient(transport=httpx.MockTransport(self.handler)),
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(204)

    def respond(self, status: int = 200, json: object = None, text: str | None = None) -> None:
        if text is not None:
            self.responses.append(httpx.Response(status, text=text))
        else:
            self.responses.append(httpx.Response(status, json=json))

    def body(self, index: int = -1) -> object:
        return json_module.loads(self.requests[index].content)


@pytest.fixture
def discord():
    """DiscordAPI backed by an in-memory transport."""
    return MockDiscord()
