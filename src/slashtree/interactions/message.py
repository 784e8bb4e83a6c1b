"""Read-only wrappers over message and user objects returned by the API."""

from __future__ import annotations

from typing import Any, Optional


class User:
    def __init__(self, data: dict[str, Any]):
        self.data = data

    @property
    def id(self) -> str:
        return self.data["id"]

    @property
    def username(self) -> str:
        return self.data.get("username", "")

    @property
    def discriminator(self) -> str:
        return self.data.get("discriminator", "0")

    @property
    def global_name(self) -> Optional[str]:
        return self.data.get("global_name")

    def __repr__(self) -> str:
        return f"User(id={self.data.get('id')!r}, username={self.username!r})"


class Message:
    def __init__(self, data: dict[str, Any]):
        self.data = data

    @property
    def id(self) -> str:
        return self.data["id"]

    @property
    def content(self) -> str:
        return self.data.get("content", "")

    @property
    def channel_id(self) -> Optional[str]:
        return self.data.get("channel_id")

    @property
    def author(self) -> Optional[User]:
        author = self.data.get("author")
        return User(author) if author else None

    def __repr__(self) -> str:
        return f"Message(id={self.data.get('id')!r})"
