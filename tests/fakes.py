"""Fake Discord objects for the ticket tests."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord


BOT_ID = 999
MOD_ROLE = 100000000000000001
CLOSE_ROLE = 100000000000000002


def make_role(role_id: int, name: str = "role"):
    role = MagicMock(spec=discord.Role)
    role.id = role_id
    role.name = name
    return role


def http_error(cls=discord.HTTPException, status: int = 500):
    return cls(MagicMock(status=status, reason="error"), "boom")


class FakeMember:
    def __init__(self, member_id: int, name: str = "tester", *, roles=(), admin: bool = False, bot: bool = False):
        self.id = member_id
        self.name = name
        self.display_name = name
        self.mention = f"<@{member_id}>"
        self.bot = bot
        self.roles = list(roles)
        self.guild_permissions = SimpleNamespace(administrator=admin)
        self.dms: list[dict] = []

    async def send(self, content=None, **kwargs):
        self.dms.append({"content": content, **kwargs})


class FakeChannel:
    def __init__(self, channel_id: int, name: str, guild: "FakeGuild", overwrites=None):
        self.id = channel_id
        self.name = name
        self.guild = guild
        self.mention = f"<#{channel_id}>"
        self.overwrites = dict(overwrites or {})
        self.history_messages: list = []
        self.sent: list[dict] = []
        self.permission_edits: list[tuple] = []
        self.deleted = False
        self.send_error = None
        self.delete_error = None

    async def send(self, content=None, **kwargs):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append({"content": content, **kwargs})

    async def set_permissions(self, target, **perms):
        self.permission_edits.append((target, perms))

    async def delete(self, reason=None):
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted = True

    async def history(self, limit=100):
        # newest first, like discord.py
        for msg in list(reversed(self.history_messages))[:limit]:
            yield msg

    def texts(self):
        return [entry["content"] for entry in self.sent]


class FakeGuild:
    def __init__(self, guild_id: int = 1):
        self.id = guild_id
        self.name = "Test Guild"
        self.default_role = make_role(guild_id, "@everyone")
        self.me = FakeMember(BOT_ID, "bot", bot=True)
        self.roles = {MOD_ROLE: make_role(MOD_ROLE, "mod"), CLOSE_ROLE: make_role(CLOSE_ROLE, "closer")}
        self.members: dict[int, FakeMember] = {}
        self.channels: dict[int, FakeChannel] = {}
        self.create_error = None
        self._next_channel_id = 5000

    def get_role(self, role_id):
        return self.roles.get(role_id)

    def get_member(self, member_id):
        return self.members.get(member_id)

    def get_channel(self, channel_id):
        return self.channels.get(channel_id)

    async def create_text_channel(self, name, category=None, overwrites=None):
        if self.create_error is not None:
            raise self.create_error
        self._next_channel_id += 1
        channel = FakeChannel(self._next_channel_id, name, self, overwrites)
        self.channels[channel.id] = channel
        return channel


class FakeBot:
    def __init__(self, guild: FakeGuild):
        self.user = guild.me
        self.guild = guild

    def get_channel(self, channel_id):
        return self.guild.get_channel(channel_id)


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, *, hours: float = 0, seconds: float = 0):
        self.now += int(hours * 3_600_000 + seconds * 1000)


def make_interaction(user, guild, channel=None, client=None):
    return SimpleNamespace(
        user=user,
        guild=guild,
        channel=channel,
        client=client,
        response=SimpleNamespace(
            send_message=AsyncMock(),
            defer=AsyncMock(),
            is_done=MagicMock(return_value=False),
        ),
        followup=SimpleNamespace(send=AsyncMock()),
        edit_original_response=AsyncMock(),
    )


def make_message(author, channel, content="", attachments=()):
    return SimpleNamespace(
        author=author,
        channel=channel,
        guild=channel.guild,
        content=content,
        attachments=list(attachments),
        mentions=[],
        delete=AsyncMock(),
    )


