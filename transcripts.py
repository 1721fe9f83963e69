# -*- coding: utf-8 -*-
import io
import logging

import discord

logger = logging.getLogger(__name__)


def format_line(msg) -> str:
    line = f"{msg.author.name}: {msg.content}"
    if msg.attachments:
        line += " [" + ", ".join(a.url for a in msg.attachments) + "]"
    return line


async def create_transcript(channel, limit=100) -> str:
    """Fetches up to ``limit`` recent messages and renders them oldest first."""
    messages = [msg async for msg in channel.history(limit=limit)]
    messages.reverse()
    header = f"Transcript of #{channel.name} ({len(messages)} messages)\n\n"
    return header + "\n".join(format_line(msg) for msg in messages)


def find_ticket_owner(channel, bot_user_id):
    """Returns the one member granted explicit view access that isn't the bot.

    Roles (staff, @everyone) are skipped, so on a ticket channel this leaves
    the ticket requester. Overwrites discord.py could not resolve come back as
    ``discord.Object``; those are looked up as members and skipped if absent.
    """
    for target, overwrite in channel.overwrites.items():
        if isinstance(target, discord.Role):
            continue
        if target.id == bot_user_id or not overwrite.view_channel:
            continue
        if isinstance(target, discord.Object):
            target = channel.guild.get_member(target.id)
            if target is None:
                continue
        return target
    return None


async def send_transcript(channel, bot_user_id, limit=100) -> bool:
    """DMs the transcript to the ticket owner. Failures are logged, never raised."""
    owner = find_ticket_owner(channel, bot_user_id)
    if owner is None:
        logger.warning("No ticket owner found in #%s, transcript not sent.", channel.name)
        return False

    try:
        text = await create_transcript(channel, limit=limit)
    except discord.HTTPException as e:
        logger.error("Could not read history of #%s: %s", channel.name, e)
        return False

    transcript_file = discord.File(io.BytesIO(text.encode("utf-8")), filename=f"transcript-{channel.name}.txt")
    try:
        await owner.send(
            content=f"📜 Here is the transcript of your ticket **#{channel.name}**.",
            file=transcript_file,
        )
    except discord.HTTPException as e:
        logger.warning("Failed to DM transcript to %s: %s", owner.id, e)
        return False
    logger.info("Sent transcript of #%s to %s", channel.name, owner.id)
    return True
