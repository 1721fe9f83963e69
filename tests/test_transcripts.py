import asyncio
from types import SimpleNamespace

import discord

from fakes import BOT_ID, FakeChannel, FakeGuild, FakeMember, http_error, make_role
from transcripts import create_transcript, find_ticket_owner, send_transcript


def _msg(author, content, *urls):
    return SimpleNamespace(author=author, content=content, attachments=[SimpleNamespace(url=u) for u in urls])


def _ticket_channel():
    guild = FakeGuild()
    owner = FakeMember(42, "alice")
    overwrites = {
        guild.default_role: discord.PermissionOverwrite(view_channel=False),
        make_role(7, "mods"): discord.PermissionOverwrite(view_channel=True),
        guild.me: discord.PermissionOverwrite(view_channel=True),
        owner: discord.PermissionOverwrite(view_channel=True, send_messages=False),
    }
    return FakeChannel(77, "ticket-alice", guild, overwrites), owner


def test_transcript_is_oldest_first_with_attachments():
    channel, owner = _ticket_channel()
    mod = FakeMember(7, "mod")
    channel.history_messages = [
        _msg(owner, "hi"),
        _msg(mod, "send stats"),
        _msg(owner, "here", "https://cdn.example/a.png", "https://cdn.example/b.png"),
    ]

    text = asyncio.run(create_transcript(channel))

    lines = text.splitlines()
    assert lines[0] == "Transcript of #ticket-alice (3 messages)"
    assert lines[2:] == [
        "alice: hi",
        "mod: send stats",
        "alice: here [https://cdn.example/a.png, https://cdn.example/b.png]",
    ]


def test_transcript_respects_limit():
    channel, owner = _ticket_channel()
    channel.history_messages = [_msg(owner, str(i)) for i in range(10)]

    text = asyncio.run(create_transcript(channel, limit=3))

    assert text.splitlines()[2:] == ["alice: 7", "alice: 8", "alice: 9"]


def test_find_owner_skips_roles_and_bot():
    channel, owner = _ticket_channel()

    assert find_ticket_owner(channel, BOT_ID) is owner


def test_find_owner_none_without_member_overwrite():
    channel, owner = _ticket_channel()
    del channel.overwrites[owner]

    assert find_ticket_owner(channel, BOT_ID) is None


def test_send_transcript_dm_failure_is_swallowed():
    channel, owner = _ticket_channel()

    async def refuse(*args, **kwargs):
        raise http_error(discord.Forbidden, 403)

    owner.send = refuse

    assert asyncio.run(send_transcript(channel, BOT_ID)) is False


def test_send_transcript_delivers_file():
    channel, owner = _ticket_channel()
    channel.history_messages = [_msg(owner, "bye")]

    assert asyncio.run(send_transcript(channel, BOT_ID)) is True
    assert owner.dms[0]["file"].filename == "transcript-ticket-alice.txt"


def test_find_owner_resolves_unresolved_overwrite():
    channel, owner = _ticket_channel()
    overwrite = channel.overwrites.pop(owner)
    channel.overwrites[discord.Object(id=owner.id)] = overwrite

    assert find_ticket_owner(channel, BOT_ID) is None

    channel.guild.members[owner.id] = owner
    assert find_ticket_owner(channel, BOT_ID) is owner
