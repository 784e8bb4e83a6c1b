"""
Bitfield helpers for Discord permission and channel flags.

Permission masks are 64-bit values; the API transports them as decimal
strings, see SlashRootCommandBuilder.export().
"""

from __future__ import annotations

from enum import IntFlag
from typing import Generic, TypeVar


class PermissionFlags(IntFlag):
    CREATE_INSTANT_INVITE = 1 << 0
    KICK_MEMBERS = 1 << 1
    BAN_MEMBERS = 1 << 2
    ADMINISTRATOR = 1 << 3
    MANAGE_CHANNELS = 1 << 4
    MANAGE_GUILD = 1 << 5
    ADD_REACTIONS = 1 << 6
    VIEW_AUDIT_LOG = 1 << 7
    PRIORITY_SPEAKER = 1 << 8
    STREAM = 1 << 9
    VIEW_CHANNEL = 1 << 10
    SEND_MESSAGES = 1 << 11
    SEND_TTS_MESSAGES = 1 << 12
    MANAGE_MESSAGES = 1 << 13
    EMBED_LINKS = 1 << 14
    ATTACH_FILES = 1 << 15
    READ_MESSAGE_HISTORY = 1 << 16
    MENTION_EVERYONE = 1 << 17
    USE_EXTERNAL_EMOJIS = 1 << 18
    VIEW_GUILD_INSIGHTS = 1 << 19
    CONNECT = 1 << 20
    SPEAK = 1 << 21
    MUTE_MEMBERS = 1 << 22
    DEAFEN_MEMBERS = 1 << 23
    MOVE_MEMBERS = 1 << 24
    USE_VAD = 1 << 25
    CHANGE_NICKNAME = 1 << 26
    MANAGE_NICKNAMES = 1 << 27
    MANAGE_ROLES = 1 << 28
    MANAGE_WEBHOOKS = 1 << 29
    MANAGE_GUILD_EXPRESSIONS = 1 << 30
    USE_APPLICATION_COMMANDS = 1 << 31
    REQUEST_TO_SPEAK = 1 << 32
    MANAGE_EVENTS = 1 << 33
    MANAGE_THREADS = 1 << 34
    CREATE_PUBLIC_THREADS = 1 << 35
    CREATE_PRIVATE_THREADS = 1 << 36
    USE_EXTERNAL_STICKERS = 1 << 37
    SEND_MESSAGES_IN_THREADS = 1 << 38
    USE_EMBEDDED_ACTIVITIES = 1 << 39
    MODERATE_MEMBERS = 1 << 40
    VIEW_CREATOR_MONETIZATION_ANALYTICS = 1 << 41
    USE_SOUNDBOARD = 1 << 42
    CREATE_GUILD_EXPRESSIONS = 1 << 43
    CREATE_EVENTS = 1 << 44
    USE_EXTERNAL_SOUNDS = 1 << 45
    SEND_VOICE_MESSAGES = 1 << 46
    SEND_POLLS = 1 << 47
    USE_EXTERNAL_APPS = 1 << 48


class ChannelFlags(IntFlag):
    PINNED = 1 << 1
    REQUIRE_TAG = 1 << 4
    HIDE_MEDIA_DOWNLOAD_OPTIONS = 1 << 15


F = TypeVar("F", PermissionFlags, ChannelFlags)


class FlagField(Generic[F]):
    """Read-only view over a flags bitfield.

    Construct from a single int (the raw mask) or from any number of flags:

        FlagField(0x8)
        FlagField(PermissionFlags.KICK_MEMBERS, PermissionFlags.BAN_MEMBERS)
    """

    def __init__(self, *value: int | F):
        self._flags = 0
        if len(value) == 1 and not isinstance(value[0], (PermissionFlags, ChannelFlags)):
            self._flags = int(value[0])
        else:
            for flag in value:
                self._flags |= int(flag)

    def has(self, *flags: F) -> bool:
        """Return True if every given flag is set."""
        return all(self._flags & int(flag) == int(flag) for flag in flags)

    def as_number(self) -> int:
        return self._flags

    def __int__(self) -> int:
        return self._flags

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FlagField):
            return self._flags == other._flags
        if isinstance(other, int):
            return self._flags == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._flags)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._flags:#x})"


class WritableFlagField(FlagField[F]):
    """Flags bitfield that can be modified in place."""

    def add(self, *flags: F) -> "WritableFlagField[F]":
        for flag in flags:
            self._flags |= int(flag)
        return self

    def remove(self, *flags: F) -> "WritableFlagField[F]":
        for flag in flags:
            self._flags &= ~int(flag)
        return self


class PermissionFlagField(WritableFlagField[PermissionFlags]):
    """Builds a permissions field."""


class ReadonlyPermissionFlagField(FlagField[PermissionFlags]):
    """Stores a permissions field."""


class ChannelFlagField(WritableFlagField[ChannelFlags]):
    """Builds a channel flags field."""
