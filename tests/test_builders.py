"""
Tests for command builders and permission flags.
"""

import pytest
from pydantic import ValidationError

from slashtree import (
    ChannelFlagField,
    ChannelFlags,
    PermissionFlagField,
    PermissionFlags,
    ReadonlyPermissionFlagField,
    SlashRootCommandBuilder,
    SlashSubCommandBuilder,
)


# ============================================================================
# Flag Field Tests
# ============================================================================

class TestPermissionFlagField:
    """Tests for permission bitfields."""

    def test_from_flags(self):
        field = PermissionFlagField(PermissionFlags.KICK_MEMBERS, PermissionFlags.BAN_MEMBERS)
        assert field.as_number() == 0x6

    def test_from_number(self):
        field = PermissionFlagField(0x8)
        assert field.has(PermissionFlags.ADMINISTRATOR)

    def test_single_flag_is_not_treated_as_raw(self):
        field = PermissionFlagField(PermissionFlags.SEND_MESSAGES)
        assert field.as_number() == 1 << 11

    def test_empty(self):
        assert PermissionFlagField().as_number() == 0

    def test_has_requires_all(self):
        field = PermissionFlagField(PermissionFlags.KICK_MEMBERS)
        assert field.has(PermissionFlags.KICK_MEMBERS)
        assert not field.has(PermissionFlags.KICK_MEMBERS, PermissionFlags.BAN_MEMBERS)

    def test_add_and_remove_chain(self):
        field = PermissionFlagField()
        field.add(PermissionFlags.SPEAK, PermissionFlags.CONNECT).remove(PermissionFlags.SPEAK)
        assert field.has(PermissionFlags.CONNECT)
        assert not field.has(PermissionFlags.SPEAK)

    def test_high_bits(self):
        field = PermissionFlagField(PermissionFlags.USE_EXTERNAL_APPS)
        assert field.as_number() == 1 << 48

    def test_readonly_has_no_mutators(self):
        field = ReadonlyPermissionFlagField(PermissionFlags.STREAM)
        assert field.has(PermissionFlags.STREAM)
        assert not hasattr(field, "add")
        assert not hasattr(field, "remove")

    def test_equality(self):
        assert PermissionFlagField(0x6) == PermissionFlagField(
            PermissionFlags.KICK_MEMBERS, PermissionFlags.BAN_MEMBERS
        )
        assert PermissionFlagField(0x6) == 6


class TestChannelFlagField:
    def test_channel_flags(self):
        field = ChannelFlagField(ChannelFlags.PINNED, ChannelFlags.REQUIRE_TAG)
        assert field.as_number() == 0x12
        field.remove(ChannelFlags.PINNED)
        assert field.as_number() == 0x10


# ============================================================================
# Builder Tests
# ============================================================================

class TestSlashRootCommandBuilder:
    """Tests for root command builders."""

    def test_kind(self):
        builder = SlashRootCommandBuilder(description="root")
        assert builder.kind == "root"

    def test_execute_is_optional(self):
        builder = SlashRootCommandBuilder(description="root")
        assert builder.execute is None

    def test_export_omits_handler(self):
        builder = SlashRootCommandBuilder(description="root", execute=lambda i: 1)
        exported = builder.export()
        assert "execute" not in exported
        assert "kind" not in exported
        assert exported == {"description": "root"}

    def test_export_permissions_as_decimal_string(self):
        builder = SlashRootCommandBuilder(
            description="root",
            default_member_permissions=PermissionFlagField(PermissionFlags.ADMINISTRATOR),
        )
        assert builder.export()["default_member_permissions"] == "8"

    def test_export_permissions_beyond_safe_integer(self):
        mask = (1 << 60) | 1
        builder = SlashRootCommandBuilder(description="root", default_member_permissions=mask)
        assert builder.export()["default_member_permissions"] == str(mask)

    def test_permissions_from_string(self):
        builder = SlashRootCommandBuilder(description="root", default_member_permissions="32")
        assert builder.default_member_permissions.has(PermissionFlags.MANAGE_GUILD)

    def test_permissions_are_copied(self):
        perms = PermissionFlagField(PermissionFlags.KICK_MEMBERS)
        builder = SlashRootCommandBuilder(description="root", default_member_permissions=perms)

        perms.add(PermissionFlags.ADMINISTRATOR)

        assert builder.export()["default_member_permissions"] == "2"
        assert isinstance(builder.default_member_permissions, ReadonlyPermissionFlagField)
        assert not hasattr(builder.default_member_permissions, "add")

    def test_invalid_permissions(self):
        with pytest.raises(ValidationError):
            SlashRootCommandBuilder(description="root", default_member_permissions="admin")

    def test_extra_fields_pass_through(self):
        builder = SlashRootCommandBuilder(description="root", nsfw=True, dm_permission=False)
        assert builder.export() == {"description": "root", "nsfw": True, "dm_permission": False}

    def test_immutable(self):
        builder = SlashRootCommandBuilder(description="root")
        with pytest.raises(ValidationError):
            builder.description = "changed"

    def test_kind_cannot_be_overridden(self):
        with pytest.raises(ValidationError):
            SlashRootCommandBuilder(description="root", kind="sub")

    @pytest.mark.asyncio
    async def test_run_without_handler(self):
        builder = SlashRootCommandBuilder(description="root")
        assert await builder.run(object()) is None

    @pytest.mark.asyncio
    async def test_run_sync_and_async_handlers(self):
        async def async_execute(interaction):
            return "async"

        assert await SlashRootCommandBuilder(description="r", execute=lambda i: "sync").run(None) == "sync"
        assert await SlashRootCommandBuilder(description="r", execute=async_execute).run(None) == "async"


class TestSlashSubCommandBuilder:
    """Tests for sub command builders."""

    def test_execute_is_required(self):
        with pytest.raises(ValidationError):
            SlashSubCommandBuilder(description="sub")

    def test_kind(self):
        builder = SlashSubCommandBuilder(description="sub", execute=lambda i, p: p)
        assert builder.kind == "sub"

    def test_export_omits_handler(self):
        builder = SlashSubCommandBuilder(description="sub", execute=lambda i, p: p)
        assert builder.export() == {"description": "sub"}

    @pytest.mark.asyncio
    async def test_run_receives_previous(self):
        seen = []

        async def execute(interaction, previous):
            seen.append(previous)
            return previous + 1

        builder = SlashSubCommandBuilder(description="sub", execute=execute)
        assert await builder.run("interaction", 41) == 42
        assert seen == [41]
